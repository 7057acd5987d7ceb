"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    INVALID_ARGUMENTS = 1
    CONNECTION_ERROR = 2
    NOT_FOUND = 3


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    SUPPORTED_SOURCES = ["nuget", "github"]
    DEFAULT_SOURCE = "nuget"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    ENV_LOG_LEVEL = "BADGE_API_LOG_LEVEL"

    # Version sources
    REGISTRY_URL_NUGET_FLAT = "https://api.nuget.org/v3-flatcontainer/"
    GITHUB_API_BASE = "https://api.github.com"
    GITHUB_API_VERSION = "2022-11-28"
    GITHUB_DEFAULT_ORG = "localstack-dotnet"
    ENV_GITHUB_TOKEN = "GITHUB_TOKEN"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for version source requests
    HTTP_RETRY_MAX = 3

    # CI test results
    PLATFORMS = ["linux", "windows", "macos"]
    TEST_TRACKS = ["v1", "v2"]
    DEFAULT_TEST_TRACK = "v2"
    TEST_PACKAGES = ["LocalStack.Aspire.Hosting"]
    GIST_BASE_URL_V1 = "https://gist.githubusercontent.com/Blind-Striker/fab5b0837878e8cad455ad28190e0ef0/raw/"
    GIST_BASE_URL_V2 = "https://gist.githubusercontent.com/Blind-Striker/472c59b7c2a1898c48a29f3c88897c5a/raw/"
    GIST_BASE_URL_WITH_PACKAGE = "https://gist.githubusercontent.com/Blind-Striker/f2b8df60871ea8cd0fa6b746798690b4/raw/"
    TEST_RESULTS_TIMEOUT = 10
    TEST_RESULTS_CACHE_TTL_SEC = 300
    TEST_RESULTS_USER_AGENT = "LocalStack-Badge-API/1.0"
    TEST_RESULTS_FALLBACK_URL = "https://github.com/localstack-dotnet/localstack-dotnet-client/actions"

    # Badge rendering
    BADGE_SCHEMA_VERSION = 1
    CACHE_CONTROL_PACKAGE = "public, max-age=3600, stale-while-revalidate=1800"
    CACHE_CONTROL_NOT_FOUND = "public, max-age=300"
    CACHE_CONTROL_REDIRECT = "public, max-age=300"
    TEST_BADGE_CACHE_SECONDS = 300
    TEST_BADGE_UNAVAILABLE_CACHE_SECONDS = 60

    # Server
    DEFAULT_HOST = "127.0.0.1"
    DEFAULT_PORT = 8080
