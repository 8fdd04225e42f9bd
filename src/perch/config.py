"""Application configuration.

AppConfig is a frozen dataclass: immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=True, namespace="blog", secret_key="s3cr3t")
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False

    # Identity
    app_name: str = "perch"

    # Security
    secret_key: str = ""

    # Mount point stripped from incoming paths (e.g. "/blog" behind a proxy)
    base_path: str = ""

    # Modules: importable package root holding a ``Modules`` sub-package.
    # None disables auto-discovery.
    namespace: str | None = None
    root_path: str | Path = "."

    # Views
    shared_views_path: str | Path = "templates"
    default_layout: str = "layout"
    autoescape: bool = True
    trim_blocks: bool = True
    lstrip_blocks: bool = True

    # Limits
    max_content_length: int = 16 * 1024 * 1024  # 16 MB

    # Logging
    log_level: str = "info"
