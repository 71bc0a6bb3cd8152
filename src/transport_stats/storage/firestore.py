"""Read-only Firestore REST adapters for the dashboard collections."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError as PydanticValidationError

from transport_stats.domain.exceptions import SourceError
from transport_stats.domain.interfaces import RecordsListener, Unsubscribe
from transport_stats.domain.models import Bus, BusOrigin, Driver, Parcel, SaleRecord, User

from .listeners import ListenerRegistry

FIRESTORE_BASE_URL = "https://firestore.googleapis.com"

USERS_COLLECTION = "usuarios_registrados"
BUSES_LA_ESPERANZA_COLLECTION = "buses_la_esperanza_salida"
BUSES_TULCAN_COLLECTION = "buses_tulcan_salida"
DRIVERS_COLLECTION = "conductores_registrados"
PARCELS_COLLECTION = "encomiendas_registradas"
SALES_COLLECTION = "historial"

M = TypeVar("M", bound=BaseModel)


@dataclass(frozen=True)
class FirestoreConfig:
    project_id: str
    api_key: Optional[str] = None
    base_url: str = FIRESTORE_BASE_URL
    database: str = "(default)"
    page_size: int = 300
    timeout: float = 30.0

    def __post_init__(self) -> None:
        if not self.project_id:
            raise ValueError("project_id must be provided")
        if self.page_size <= 0:
            raise ValueError("page_size must be greater than zero")
        if self.timeout <= 0:
            raise ValueError("timeout must be greater than zero")


def decode_value(value: Mapping[str, Any]) -> Any:
    """Convert a Firestore typed value (``{"stringValue": ...}``) to Python."""

    if "nullValue" in value:
        return None
    if "stringValue" in value:
        return value["stringValue"]
    if "integerValue" in value:
        return int(value["integerValue"])
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "booleanValue" in value:
        return bool(value["booleanValue"])
    if "timestampValue" in value:
        return value["timestampValue"]
    if "referenceValue" in value:
        return value["referenceValue"]
    if "mapValue" in value:
        return decode_fields(value["mapValue"].get("fields", {}))
    if "arrayValue" in value:
        return [decode_value(item) for item in value["arrayValue"].get("values", [])]
    if "geoPointValue" in value:
        return dict(value["geoPointValue"])
    return None


def decode_fields(fields: Mapping[str, Mapping[str, Any]]) -> Dict[str, Any]:
    return {name: decode_value(raw) for name, raw in fields.items()}


def decode_document(document: Mapping[str, Any]) -> Dict[str, Any]:
    """Flatten a REST document into ``{"id": ..., **fields}``."""

    doc_id = str(document.get("name", "")).rsplit("/", 1)[-1]
    return {"id": doc_id, **decode_fields(document.get("fields", {}))}


class FirestoreClient:
    """Lists whole collections through the Firestore REST API."""

    def __init__(
        self,
        http_client: httpx.Client,
        config: FirestoreConfig,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._http = http_client
        self.config = config
        self._logger = logger or logging.getLogger(__name__)
        self._documents_url = (
            f"{config.base_url.rstrip('/')}/v1/projects/{config.project_id}"
            f"/databases/{config.database}/documents"
        )

    def list_documents(self, collection: str) -> List[Dict[str, Any]]:
        documents: List[Dict[str, Any]] = []
        page_token: Optional[str] = None
        while True:
            data = self._fetch_page(collection, page_token)
            page = data.get("documents", [])
            documents.extend(decode_document(document) for document in page)
            self._logger.debug(
                "firestore_page_fetched",
                extra={"collection": collection, "documents": len(page)},
            )
            page_token = data.get("nextPageToken")
            if not page_token:
                return documents

    def _fetch_page(self, collection: str, page_token: Optional[str]) -> Dict[str, Any]:
        params: Dict[str, Any] = {"pageSize": self.config.page_size}
        if page_token:
            params["pageToken"] = page_token
        if self.config.api_key:
            params["key"] = self.config.api_key

        try:
            response = self._http.get(
                f"{self._documents_url}/{collection}",
                params=params,
                timeout=self.config.timeout,
            )
        except httpx.HTTPError as exc:
            raise SourceError(
                "Firestore request failed", context={"collection": collection}
            ) from exc

        if response.status_code >= 400:
            raise SourceError(
                self._error_message(response),
                context={"collection": collection, "status_code": response.status_code},
            )
        try:
            return response.json()
        except ValueError as exc:
            raise SourceError(
                "Malformed Firestore response", context={"collection": collection}
            ) from exc

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            return response.json()["error"]["message"]
        except (ValueError, KeyError, TypeError):
            return "Firestore request failed"


class FirestoreSaleSource:
    """Sale-record source over the ``historial`` collection.

    Firestore REST has no push channel, so callers drive updates with
    :meth:`refresh`, which fetches and notifies subscribers.
    """

    def __init__(
        self,
        client: FirestoreClient,
        collection: str = SALES_COLLECTION,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._client = client
        self._collection = collection
        self._logger = logger or logging.getLogger(__name__)
        self._listeners: ListenerRegistry[List[SaleRecord]] = ListenerRegistry(self._logger)

    def fetch_all(self) -> List[SaleRecord]:
        return [
            SaleRecord.model_validate(document)
            for document in self._client.list_documents(self._collection)
        ]

    def subscribe(self, listener: RecordsListener) -> Unsubscribe:
        return self._listeners.add(listener)

    def refresh(self) -> List[SaleRecord]:
        records = self.fetch_all()
        self._logger.info(
            "sales_refreshed",
            extra={"collection": self._collection, "records": len(records)},
        )
        self._listeners.notify(records)
        return records


class FirestoreFleetSource:
    """Loads the user, bus, driver and parcel collections for the dashboard."""

    def __init__(
        self, client: FirestoreClient, *, logger: Optional[logging.Logger] = None
    ) -> None:
        self._client = client
        self._logger = logger or logging.getLogger(__name__)

    def fetch_users(self) -> List[User]:
        return self._load(USERS_COLLECTION, User)

    def fetch_buses(self) -> List[Bus]:
        buses: List[Bus] = []
        for collection, origin in (
            (BUSES_LA_ESPERANZA_COLLECTION, BusOrigin.LA_ESPERANZA),
            (BUSES_TULCAN_COLLECTION, BusOrigin.TULCAN),
        ):
            buses.extend(self._load(collection, Bus, defaults={"origen": origin}))
        return buses

    def fetch_drivers(self) -> List[Driver]:
        return self._load(DRIVERS_COLLECTION, Driver)

    def fetch_parcels(self) -> List[Parcel]:
        return self._load(PARCELS_COLLECTION, Parcel)

    def _load(
        self,
        collection: str,
        model: Type[M],
        *,
        defaults: Optional[Mapping[str, Any]] = None,
    ) -> List[M]:
        items: List[M] = []
        for document in self._client.list_documents(collection):
            try:
                items.append(model.model_validate({**(defaults or {}), **document}))
            except PydanticValidationError:
                self._logger.warning(
                    "document_skipped",
                    extra={"collection": collection, "document_id": document.get("id")},
                )
        return items
