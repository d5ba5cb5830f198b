"""
Configuration management using Pydantic Settings.

Environment variables (case insensitive):
- SOLR_URL: Base URL of the Solr core/collection holding the full texts
- SOLR_TIMEOUT: Timeout in seconds for Solr requests
- DATABASE_URL: SQLAlchemy database URL of the annotation page store
- DATABASE_ECHO: Log SQL statements
- DEFAULT_PAGE_SIZE / MAX_PAGE_SIZE: Limits for the number of returned annotations
- RESOURCE_BASE_URL, ANNOTATION_BASE_URL, IIIF_BASE_URL, SEARCH_BASE_URL: Output URLs
- LOG_LEVEL: Logging level
"""
from dataclasses import dataclass

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.constants import DEFAULT_SEARCH_PARAMS, HIT_MERGE_MAX_DISTANCE


@dataclass(frozen=True)
class UrlConfig:
    """Base URLs used when formatting search results."""
    resource_base_url: str
    annotation_base_url: str
    iiif_base_url: str
    search_base_url: str
    annopage_directory: str = "/annopage/"
    annotation_directory: str = "/anno/"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Solr Configuration
    solr_url: str = Field(default="http://localhost:8983/solr/fulltext")
    solr_timeout: float = Field(default=10.0)
    solr_id_field: str = Field(default="europeana_id")
    solr_highlight_field_prefix: str = Field(default="fulltext.")

    # Database Configuration
    database_url: str = Field(default="sqlite:///fulltext_store.db")
    database_echo: bool = Field(default=False)

    # Search Parameters
    default_page_size: int = Field(default=DEFAULT_SEARCH_PARAMS['page_size'])
    max_page_size: int = Field(default=DEFAULT_SEARCH_PARAMS['max_page_size'])
    hit_merge_max_distance: int = Field(default=HIT_MERGE_MAX_DISTANCE)

    # Output URLs
    resource_base_url: str = Field(default="https://www.europeana.eu/api/fulltext/")
    annotation_base_url: str = Field(default="https://iiif.europeana.eu/presentation/")
    iiif_base_url: str = Field(default="https://iiif.europeana.eu/presentation/")
    search_base_url: str = Field(default="https://iiif.europeana.eu/presentation/")

    # API Configuration
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8002)

    # Logging
    log_level: str = Field(default="INFO")

    def get_url_config(self) -> UrlConfig:
        """Get output URL configuration as an immutable value."""
        return UrlConfig(
            resource_base_url=self.resource_base_url,
            annotation_base_url=self.annotation_base_url,
            iiif_base_url=self.iiif_base_url,
            search_base_url=self.search_base_url,
        )


# Global settings instance
settings = Settings()
