"""Basic statistics example using the built-in DI container."""

from transport_stats.core.config import DashboardConfig
from transport_stats.core.container import DIContainer
from transport_stats.domain.models import SaleRecord


def main() -> None:
    config = DashboardConfig(db_path="example_sales.db")
    DIContainer.configure_logging(config)
    service = DIContainer.create_service(config)
    service.subscribe(
        lambda stats: print("Live update:", stats.total_sales, "sales")
    )

    service.record_sale(
        SaleRecord(
            route_name="Tulcan",
            departure_date="2024-05-01",
            departure_time="08:00",
            payment_method="efectivo",
            vehicle_id="12",
            price="2.50",
        )
    )

    stats = service.get_stats()
    print("Top route:", stats.top_route.name, stats.top_route.count)
    print("Revenue:", stats.total_revenue)
    for entry in stats.revenue_per_vehicle:
        print(f"Bus {entry.vehicle_id}: {entry.revenue:.2f}")


if __name__ == "__main__":
    main()
