from application.common.cancellation import CancellationToken

__all__ = ["CancellationToken"]
