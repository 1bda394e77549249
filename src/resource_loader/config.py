from pydantic import SecretStr
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Loader used by the server: 'default' (unqualified paths are package resources)
    # or 'filesystem' (unqualified paths are relative to the working directory)
    loader: str = "default"

    # Package that anchors `classpath:` locations and unqualified paths of the default loader
    classpath_package: str = "resource_loader"

    # Timeout (seconds) for http(s) URL resources
    http_timeout: float = 10

    # Optional Azure container exposed through the `azure:` protocol resolver
    azure_connection_string: SecretStr | None = None
    azure_container: str | None = None
    azure_prefix: str = "azure:"

    # Register the zip archive resolver for `zip:` locations
    enable_zip_resolver: bool = True

    # Limits
    # Maximum number of bytes returned by read_resource, whatever the caller asks for
    max_read_bytes: int = 1024 * 1024

    class Config:
        env_prefix = "RESOURCE_LOADER_"
        env_file = ".env"
