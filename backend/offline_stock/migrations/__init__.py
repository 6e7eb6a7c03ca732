"""
Ordered, versioned schema steps.

Each module exposes `version`, `description` and `upgrade(op, conn)`, where
`op` is an Alembic Operations object bound to the store connection. Steps
introspect the live schema before changing it, so any of them can run again
(on a legacy store without a version marker, or after a crash) without
effect beyond completing what is missing.
"""

from . import (
    v001_baseline,
    v002_payment_tracking,
    v003_shopping_lists,
    v004_shopping_list_items,
    v005_users,
    v006_payment_logs,
    v007_list_transfers,
)

STEPS = [
    v001_baseline,
    v002_payment_tracking,
    v003_shopping_lists,
    v004_shopping_list_items,
    v005_users,
    v006_payment_logs,
    v007_list_transfers,
]

LATEST_VERSION = STEPS[-1].version
