"""
Réconciliation des commandes 'pending' anciennes (outil d'exploitation).

Usage:
    python -m medicare.orders.reconcile --minutes 120 --max 100 [--dry-run]

- Commandes avec session Stripe: vérification du paiement (complétées si payées)
- Commandes sans session (échec Stripe au checkout): annulées
"""
import argparse
import logging
import sys
from typing import List, Optional

from medicare import config
from medicare.orders import service as orders_service
from medicare.utils.errors import StorefrontError


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Reconcile stale pending orders against Stripe")
    parser.add_argument("--minutes", type=int, default=config.STALE_PENDING_MINUTES, help="Only orders created more than N minutes ago")
    parser.add_argument("--max", type=int, default=100, help="Max orders to process")
    parser.add_argument("--dry-run", action="store_true", help="Report what would change without writing")
    opts = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        counts = orders_service.reconcile_stale_orders(opts.minutes, limit=opts.max, dry_run=opts.dry_run)
    except StorefrontError as e:
        print(f"error: {e.message}", file=sys.stderr)
        return 1
    print(
        f"Checked {counts['checked']}, completed {counts['completed']}, cancelled {counts['cancelled']}, "
        f"unchanged {counts['unchanged']}, errors {counts['errors']}."
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
