from __future__ import annotations

from setuptools import find_packages, setup

setup(
    name="cinescope",
    version="0.1.0",
    # Repo convention: sources live under `backend/` and install as the
    # top-level `domain`, `application` and `infrastructure` packages.
    package_dir={"": "backend"},
    packages=find_packages(
        where="backend",
        include=[
            "domain",
            "domain.*",
            "application",
            "application.*",
            "infrastructure",
            "infrastructure.*",
        ],
    ),
    package_data={"domain.config": ["*.yaml"]},
    python_requires=">=3.10",
    install_requires=[
        "aiohttp>=3.9",
        "pydantic==2.10.6",
        "python-dotenv>=1.0",
        "pyyaml>=6.0",
    ],
    extras_require={
        "test": ["pytest>=8.0"],
    },
)
