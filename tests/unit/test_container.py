import httpx
import pytest

from transport_stats.analytics.service import StatisticsService
from transport_stats.core.config import DashboardConfig
from transport_stats.core.container import DIContainer
from transport_stats.domain.exceptions import ConfigurationError
from transport_stats.storage.firestore import FirestoreConfig, FirestoreSaleSource
from transport_stats.storage.sqlite_repository import SQLiteSaleRepository


def _firestore_payloads():
    def doc(collection, doc_id, **fields):
        return {
            "name": f"projects/demo/databases/(default)/documents/{collection}/{doc_id}",
            "fields": fields,
        }

    return {
        "usuarios_registrados": [
            doc("usuarios_registrados", "u1", estado={"stringValue": "conectado"}),
            doc("usuarios_registrados", "u2", estado={"stringValue": "desconectado"}),
        ],
        "buses_la_esperanza_salida": [
            doc("buses_la_esperanza_salida", "b1", activo={"booleanValue": True}),
        ],
        "buses_tulcan_salida": [
            doc("buses_tulcan_salida", "b2", activo={"booleanValue": False}),
        ],
        "conductores_registrados": [doc("conductores_registrados", "d1")],
        "encomiendas_registradas": [
            doc("encomiendas_registradas", "p1", estado={"stringValue": "pendiente"}),
        ],
        "historial": [
            doc("historial", "h1", precio={"integerValue": "4"}),
            doc("historial", "h2", precio={"stringValue": "1.5"}),
        ],
    }


def _mock_http_factory(payloads):
    def handler(request: httpx.Request) -> httpx.Response:
        collection = request.url.path.rsplit("/", 1)[-1]
        return httpx.Response(200, json={"documents": payloads.get(collection, [])})

    def factory(config: FirestoreConfig) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(handler), timeout=config.timeout)

    return factory


def test_create_service_with_sqlite_source(tmp_path):
    config = DashboardConfig(db_path=str(tmp_path / "sales.db"))

    service = DIContainer.create_service(config)

    assert isinstance(service, StatisticsService)
    assert isinstance(service._source, SQLiteSaleRepository)  # type: ignore[attr-defined]


def test_create_service_with_firestore_source():
    config = DashboardConfig(source="firestore", firestore_project="demo")

    service = DIContainer.create_service(
        config, http_client_factory=_mock_http_factory(_firestore_payloads())
    )

    assert isinstance(service._source, FirestoreSaleSource)  # type: ignore[attr-defined]
    assert service.get_stats().total_revenue == pytest.approx(5.5)


def test_create_firestore_client_requires_project():
    with pytest.raises(ConfigurationError):
        DIContainer.create_firestore_client(DashboardConfig())


def test_load_dashboard_reads_every_collection():
    config = DashboardConfig(source="firestore", firestore_project="demo")

    stats = DIContainer.load_dashboard(
        config, http_client_factory=_mock_http_factory(_firestore_payloads())
    )

    assert stats.users_connected == 1
    assert stats.users_disconnected == 1
    assert stats.buses_active == 1
    assert stats.buses_inactive == 1
    assert stats.drivers_active == 1
    assert stats.parcels.pending == 1
    assert stats.total_revenue == pytest.approx(5.5)


def test_create_report_builder_uses_config_currency():
    builder = DIContainer.create_report_builder(DashboardConfig(currency="EUR"))
    report = builder.build_general_report([{"precio": 2}])
    assert dict(report.summary)["Total revenue"] == "€2.00"


def test_load_dashboard_closes_its_http_client():
    created = []
    build = _mock_http_factory(_firestore_payloads())

    def factory(config: FirestoreConfig) -> httpx.Client:
        client = build(config)
        created.append(client)
        return client

    config = DashboardConfig(source="firestore", firestore_project="demo")
    stats = DIContainer.load_dashboard(config, http_client_factory=factory)

    assert stats.user_roles.users == 2
    assert len(created) == 1
    assert created[0].is_closed
