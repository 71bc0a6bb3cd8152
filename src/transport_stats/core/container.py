"""Dependency injection container for building wired statistics services."""

from __future__ import annotations

import logging
from typing import Callable, Optional

import httpx

from transport_stats.analytics.aggregator import HistoryAggregator
from transport_stats.analytics.dashboard import DashboardAggregator
from transport_stats.analytics.service import StatisticsService
from transport_stats.core.config import DashboardConfig
from transport_stats.domain.exceptions import ConfigurationError
from transport_stats.domain.interfaces import ISaleRecordSource
from transport_stats.domain.models import DashboardStats
from transport_stats.reporting.report import ReportBuilder
from transport_stats.storage.firestore import (
    FirestoreClient,
    FirestoreConfig,
    FirestoreFleetSource,
    FirestoreSaleSource,
)
from transport_stats.storage.sqlite_repository import SQLiteSaleRepository

HttpClientFactory = Callable[[FirestoreConfig], httpx.Client]


class DIContainer:
    """Factory helpers that assemble services with default wiring."""

    @staticmethod
    def create_service(
        config: Optional[DashboardConfig] = None,
        *,
        http_client_factory: Optional[HttpClientFactory] = None,
    ) -> StatisticsService:
        cfg = config or DashboardConfig.from_env()
        source = DIContainer.create_sale_source(cfg, http_client_factory=http_client_factory)
        return StatisticsService(
            source,
            HistoryAggregator(),
            recent_days=cfg.recent_days_limit,
            top_routes=cfg.top_routes_limit,
        )

    @staticmethod
    def create_sale_source(
        config: DashboardConfig,
        *,
        http_client_factory: Optional[HttpClientFactory] = None,
    ) -> ISaleRecordSource:
        if config.source == "sqlite":
            return SQLiteSaleRepository(config.db_path)
        client = DIContainer.create_firestore_client(
            config, http_client_factory=http_client_factory
        )
        return FirestoreSaleSource(client, config.sales_collection)

    @staticmethod
    def create_firestore_client(
        config: DashboardConfig,
        *,
        http_client_factory: Optional[HttpClientFactory] = None,
    ) -> FirestoreClient:
        firestore_config = DIContainer._firestore_config(config)
        factory = http_client_factory or DIContainer._build_http_client_factory()
        return FirestoreClient(factory(firestore_config), firestore_config)

    @staticmethod
    def create_report_builder(config: DashboardConfig) -> ReportBuilder:
        return ReportBuilder(
            currency=config.currency,
            top_routes=config.top_routes_limit,
            top_vehicles=config.top_vehicles_limit,
        )

    @staticmethod
    def load_dashboard(
        config: DashboardConfig,
        *,
        http_client_factory: Optional[HttpClientFactory] = None,
    ) -> DashboardStats:
        """Fetch every fleet collection from Firestore and summarize it."""

        firestore_config = DIContainer._firestore_config(config)
        factory = http_client_factory or DIContainer._build_http_client_factory()
        with factory(firestore_config) as http:
            client = FirestoreClient(http, firestore_config)
            fleet = FirestoreFleetSource(client)
            sales = FirestoreSaleSource(client, config.sales_collection)
            return DashboardAggregator().compute(
                users=fleet.fetch_users(),
                buses=fleet.fetch_buses(),
                drivers=fleet.fetch_drivers(),
                parcels=fleet.fetch_parcels(),
                sales=sales.fetch_all(),
            )

    @staticmethod
    def configure_logging(config: DashboardConfig) -> None:
        logging.basicConfig(
            level=getattr(logging, config.log_level.upper()),
            format="%(asctime)s %(levelname)s %(name)s %(message)s",
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _firestore_config(config: DashboardConfig) -> FirestoreConfig:
        if not config.firestore_project:
            raise ConfigurationError("firestore_project is required for firestore access")
        return FirestoreConfig(
            project_id=config.firestore_project,
            api_key=config.firestore_api_key,
        )

    @staticmethod
    def _build_http_client_factory() -> HttpClientFactory:
        def factory(firestore_config: FirestoreConfig) -> httpx.Client:
            return httpx.Client(timeout=firestore_config.timeout)

        return factory
