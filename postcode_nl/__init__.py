from importlib.metadata import version as _pkg_version, PackageNotFoundError as _PkgNotFound

try:
    __version__ = _pkg_version("postcode-nl-api")
except _PkgNotFound:
    __version__ = "dev"

from .client import Client, is_valid_dutch_postcode_format, validate_session_value  # noqa: E402
from .errors import ApiError, ErrorKind  # noqa: E402

__all__ = [
    "__version__",
    "Client",
    "ApiError",
    "ErrorKind",
    "is_valid_dutch_postcode_format",
    "validate_session_value",
]
