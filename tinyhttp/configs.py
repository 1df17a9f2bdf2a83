from pydantic import Field, NonNegativeInt, PositiveFloat, PositiveInt
from pydantic_settings import BaseSettings, SettingsConfigDict


class HttpConfig(BaseSettings):
    USER_AGENT: str = Field(
        description="User-Agent sent with every request",
        default="Mozilla/5.0 (compatible; MSIE 10.0; Windows NT 6.1; Trident/6.0)",
    )

    ACCEPT_ENCODING: str = Field(
        description="Accept-Encoding sent with every request",
        default="gzip,deflate",
    )

    TIMEOUT: PositiveFloat = Field(
        description="Timeout for a single exchange in seconds",
        default=100.0,
    )

    MAX_REDIRECTS: NonNegativeInt = Field(
        description="Maximum number of redirects followed per request",
        default=50,
    )

    RAISE_FOR_STATUS: bool = Field(
        description="Treat 4xx/5xx responses as transport failures",
        default=True,
    )

    MAX_CANCEL_RETRIES: NonNegativeInt | None = Field(
        description="Cap on automatic retries after a cancelled request, unlimited when unset",
        default=None,
    )

    LOG_LEVEL: str = Field(
        description="Log level",
        default="INFO",
    )

    LOG_FORMAT: str = Field(
        description="Log format",
        default="%(asctime)s.%(msecs)03d %(levelname)s [%(threadName)s] [%(filename)s:%(lineno)d] %(trace_id)s - %(message)s",
    )

    LOG_DATEFORMAT: str | None = Field(
        description="Log date format",
        default=None,
    )

    LOG_FILE: str | None = Field(
        description="File path for log output",
        default=None,
    )

    LOG_FILE_MAX_SIZE: PositiveInt = Field(
        description="Maximum size of a log file in MB before rotation",
        default=20,
    )

    LOG_FILE_BACKUP_COUNT: PositiveInt = Field(
        description="Number of rotated log files to keep",
        default=5,
    )

    model_config = SettingsConfigDict(
        env_prefix="TINYHTTP_",
        # read from dotenv format config file
        env_file=".env",
        env_file_encoding="utf-8",
        # ignore extra attributes
        extra="ignore",
    )


http_config: HttpConfig = HttpConfig()

__all__ = ["HttpConfig", "http_config"]
