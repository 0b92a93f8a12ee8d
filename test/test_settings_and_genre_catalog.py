import sys
from pathlib import Path

_BACKEND_ROOT = Path(__file__).resolve().parents[1] / "backend"
if str(_BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(_BACKEND_ROOT))

import os
import tempfile
import unittest
from unittest.mock import patch

from domain.config import genre_catalog
from domain.config.genre_catalog import find_genre, genre_name, get_genre_catalog, list_genres, load_genre_catalog
from infrastructure.config.settings import _get_env_bool, _get_env_float, _get_env_int


class TestEnvParsing(unittest.TestCase):
    def test_int_and_float_defaults_and_errors(self) -> None:
        with patch.dict(os.environ, {"CS_INT": "", "CS_FLOAT": "2.5"}, clear=False):
            self.assertEqual(_get_env_int("CS_INT", 5), 5)
            self.assertEqual(_get_env_float("CS_FLOAT", 1.0), 2.5)
            self.assertEqual(_get_env_int("CS_MISSING", 7), 7)

        with patch.dict(os.environ, {"CS_INT": "five"}, clear=False):
            with self.assertRaises(ValueError):
                _get_env_int("CS_INT", 5)
        with patch.dict(os.environ, {"CS_FLOAT": "fast"}, clear=False):
            with self.assertRaises(ValueError):
                _get_env_float("CS_FLOAT", 1.0)

    def test_bool(self) -> None:
        with patch.dict(os.environ, {"CS_FLAG": "Yes"}, clear=False):
            self.assertTrue(_get_env_bool("CS_FLAG", False))
        with patch.dict(os.environ, {"CS_FLAG": "off"}, clear=False):
            self.assertFalse(_get_env_bool("CS_FLAG", True))
        self.assertTrue(_get_env_bool("CS_FLAG_MISSING", True))


class TestGenreCatalog(unittest.TestCase):
    def setUp(self) -> None:
        genre_catalog._CATALOG_CACHE = None

    def tearDown(self) -> None:
        genre_catalog._CATALOG_CACHE = None

    def test_bundled_catalog(self) -> None:
        movie = list_genres("movie")
        self.assertEqual(movie[0].name, "Action")
        self.assertIn(10770, [g.id for g in movie])
        self.assertNotIn(10770, [g.id for g in list_genres("movie", showcase=True)])
        self.assertTrue(list_genres("tv"))
        self.assertEqual(list_genres("anime"), [])

    def test_genre_name_fallbacks(self) -> None:
        self.assertEqual(genre_name(878, "movie"), "Science Fiction")
        self.assertEqual(genre_name(10759, "tv"), "Action & Adventure")
        self.assertEqual(genre_name(424242, "movie"), "Movies")
        self.assertEqual(genre_name(424242, "tv"), "TV Shows")
        self.assertIsNone(find_genre(424242, "movie"))
        self.assertEqual(find_genre(27, "movie").name, "Horror")

    def test_path_override_and_malformed_entries(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "genres.yaml"
            path.write_text(
                "genres:\n"
                "  movie:\n"
                "    - {id: 1, name: One}\n"
                "    - {id: x, name: Bad}\n"
                "    - {id: 2, name: ''}\n"
                "    - not-a-mapping\n"
                "showcase_exclude:\n"
                "  movie: [1, nope]\n",
                encoding="utf-8",
            )
            with patch.dict(os.environ, {genre_catalog.GENRE_CATALOG_PATH_ENV: str(path)}, clear=False):
                catalog = get_genre_catalog(reload=True)

        self.assertEqual([g.id for g in catalog["genres"]["movie"]], [1])
        self.assertEqual(catalog["genres"]["tv"], [])
        self.assertEqual(catalog["showcase_exclude"]["movie"], {1})

    def test_missing_file_is_empty_catalog(self) -> None:
        catalog = load_genre_catalog(Path("/nonexistent/genres.yaml"))
        self.assertEqual(catalog["genres"], {"movie": [], "tv": []})


if __name__ == "__main__":
    unittest.main()
