from application.session.session_context import SUPPORTED_LANGUAGES, SessionContext

__all__ = ["SUPPORTED_LANGUAGES", "SessionContext"]
