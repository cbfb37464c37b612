"""
Downtime Management Script
Run the reconciliation sweep from cron and inspect scheduled downtimes
"""
import sys
import logging

from downtime_api.config import settings
from downtime_api.database import create_db_engine, create_session_factory
from downtime_api.errors import DowntimeError
from downtime_api.repositories.downtime_store import DowntimeStore
from downtime_api.services.downtime_service import DowntimeService
from downtime_api.services.sweep_service import ReconciliationSweeper

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s %(levelname)s %(name)s %(message)s',
)


def run_sweep(sweeper: ReconciliationSweeper):
    """Finish every expired downtime once"""
    updated_count = sweeper.sweep()
    print(f"\n✅ Sweep complete: {updated_count} downtime(s) marked finished\n")


def list_downtimes(service: DowntimeService, page: int, limit: int):
    """List downtimes, most recent first"""
    result = service.list(page, limit)

    print("\n" + "="*60)
    print(f"  DOWNTIMES (page {page}, {len(result.rows)} of {result.total_count})")
    print("="*60)

    if not result.rows:
        print("No downtimes found.")

    for row in result.rows:
        state = "archived" if row.archived else ("finished" if row.finished else "scheduled")
        print(f"\n#{row.id}  {row.system_name or row.system_id}  [{state}]")
        print(f"  {row.from_time:%Y-%m-%d %H:%M} → {row.to_time:%Y-%m-%d %H:%M}")
        if row.reason:
            print(f"  Reason: {row.reason}")

    print("\n" + "="*60)
    print()


def show_downtime(service: DowntimeService, window_id: int):
    """Show a single downtime"""
    row = service.get(window_id)
    print()
    for key, value in row.model_dump().items():
        print(f"{key:>12}: {value}")
    print()


def main():
    """Main function"""
    if len(sys.argv) < 2:
        print("\n📋 Downtime Management")
        print("\nUsage:")
        print("  python manage_downtimes.py sweep               - Finish expired downtimes")
        print("  python manage_downtimes.py list [page] [limit] - List downtimes")
        print("  python manage_downtimes.py show <id>           - Show one downtime")
        print("\nExample crontab entry:")
        print("  */5 * * * * cd /srv/downtime-api && python manage_downtimes.py sweep")
        print()
        return 0

    command = sys.argv[1].lower()

    engine = create_db_engine(settings.DB_URL)
    store = DowntimeStore(create_session_factory(engine))
    service = DowntimeService(store)

    try:
        if command == "sweep":
            run_sweep(ReconciliationSweeper(store))

        elif command == "list":
            page = int(sys.argv[2]) if len(sys.argv) > 2 else 1
            limit = int(sys.argv[3]) if len(sys.argv) > 3 else 50
            list_downtimes(service, page, limit)

        elif command == "show":
            if len(sys.argv) < 3:
                print("❌ Error: Please provide a downtime id")
                print("Usage: python manage_downtimes.py show <id>")
                return 1
            show_downtime(service, int(sys.argv[2]))

        else:
            print(f"❌ Unknown command: {command}")
            print("Use 'sweep', 'list' or 'show'")
            return 1

    except DowntimeError as e:
        print(f"❌ {e.message}")
        return 1
    except ValueError:
        print("❌ Page, limit and id must be whole numbers")
        return 1
    finally:
        engine.dispose()

    return 0


if __name__ == "__main__":
    sys.exit(main())
