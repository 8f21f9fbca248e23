"""CLI entry point for administrative rent ledger operations.

Usage:
    python -m src.cli.rent generate
    python -m src.cli.rent reconcile <tenant_id>
    python -m src.cli.rent history <tenant_id>

Exit Codes:
    0 - Success
    1 - Failure: error encountered (details in the log)

Logging:
    INFO level logs to both stdout and the configured log file
"""

import argparse
import logging
import sys

from src.services.config import load_config
from src.services.logging import setup_server_logging

logger = logging.getLogger("src.cli.rent")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rent", description="Rent ledger administration")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("generate", help="Generate this month's rent records (idempotent)")

    reconcile = commands.add_parser("reconcile", help="Reset a tenant's balance from their current record")
    reconcile.add_argument("tenant_id", type=int)

    history = commands.add_parser("history", help="Print a tenant's rent history")
    history.add_argument("tenant_id", type=int)
    return parser


def main(argv: list[str] | None = None) -> int:
    """
    Run one administrative command.

    Returns:
        Exit code: 0 for success, 1 for failure
    """
    args = build_parser().parse_args(argv)

    try:
        config = load_config()
        setup_server_logging(config.log_file)

        from src.services import session_scope
        from src.services.rent_generation import RentGenerationService
        from src.services.tenant_service import TenantService

        with session_scope() as db:
            if args.command == "generate":
                report = RentGenerationService(db, config).generate_monthly_rent(actor="cli")
                return 1 if report.failed else 0

            tenants = TenantService(db, config)
            if args.command == "reconcile":
                tenant = tenants.reconcile_balance(args.tenant_id, actor="cli")
                print(f"Tenant {tenant.id}: balance={tenant.balance} status={tenant.payment_status}")
                return 0

            for record in tenants.get_rent_history(args.tenant_id):
                print(
                    f"{record.month}  due={record.carried_forward_amount}  "
                    f"paid={record.amount_paid}  [{record.status}]"
                )
            return 0

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 1
    except Exception as e:
        logger.error("Command %s failed: %s", args.command, e, exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
