"""
Configuration settings for the Insert Throughput benchmark.

Uses Pydantic Settings to load environment variables for the database
connection, pool sizing, logging, and benchmark defaults. The orchestrator never
reads these directly; `RunConfig.from_settings` turns them into an explicit
run configuration.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_user: str = Field("devel", alias="DB_USER")
    db_password: str = Field("", alias="DB_PASSWORD")
    db_name: str = Field("devel", alias="DB_NAME")
    db_sslmode: str = Field("disable", alias="DB_SSLMODE")
    # Full libpq DSN; the database keyword is `dbname=`, not `database=`
    db_dsn: Optional[str] = Field(None, alias="DB_DSN")

    # Pooling
    db_pool_size: int = Field(10, alias="DB_POOL_SIZE", ge=1)
    db_conn_max_lifetime: float = Field(0.0, alias="DB_CONN_MAX_LIFETIME", ge=0)
    db_connect_timeout: float = Field(10.0, alias="DB_CONNECT_TIMEOUT", gt=0)
    db_connect_attempts: int = Field(1, alias="DB_CONNECT_ATTEMPTS", ge=1)

    # Application
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # Benchmark defaults
    benchmark_rows: int = Field(15_000_000, alias="BENCHMARK_ROWS", ge=0)
    benchmark_chunk_size: int = Field(30_000, alias="BENCHMARK_CHUNK_SIZE", ge=1)
    benchmark_table: str = Field("names", alias="BENCHMARK_TABLE")
    benchmark_name_prefix: str = Field("Adam", alias="BENCHMARK_NAME_PREFIX")
    orm_prepare_statements: bool = Field(False, alias="ORM_PREPARE_STATEMENTS")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
