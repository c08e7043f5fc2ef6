# Overview: Flask CLI command groups for bootstrap, inspection and ledger checks.

# backend/giftledger/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP=giftledger
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init
#   Materialize the seed dataset if no data file exists yet (idempotent).
# - python -m flask system reset --yes
#   DEV/TEST only: delete the data file and write a fresh seed dataset.
#
# Inspection:
# - python -m flask inventory list [--search watch] [--store-id 1]
# - python -m flask requests pending
# - python -m flask ledger history <holder_id> [--limit 20]
#
# Integrity:
# - python -m flask ledger verify
#   Check that every balance equals the sum of its ledger entries.

import os

import click
from flask.cli import with_appcontext

from .extensions import store
from .services import inventory_service, query_service


@click.group("system")
def system_group():
    """Dataset bootstrap commands."""


@system_group.command("init")
@with_appcontext
def init_system():
    """Create the data file with seed data if it does not exist."""
    existed = os.path.exists(store.path)
    data = store.snapshot()
    if existed:
        click.echo(f"OK Dataset already present at {store.path}")
    else:
        click.echo(f"OK Seed dataset written to {store.path}")
    click.echo(f"  holders={len(data.holders)} gifts={len(data.gifts)} inventory={len(data.inventory)}")


@system_group.command("reset")
@click.option("--yes", is_flag=True, help="Confirm deleting all data")
@with_appcontext
def reset_system(yes):
    """DEV/TEST only: replace the dataset with fresh seed data."""
    if not yes:
        click.echo("ERROR Refusing to reset without --yes", err=True)
        raise SystemExit(1)
    if os.path.exists(store.path):
        os.remove(store.path)
    data = store.reload()
    click.echo(f"OK Dataset reset ({len(data.holders)} holders, {len(data.gifts)} gifts)")


@click.group("inventory")
def inventory_group():
    """Inventory inspection commands."""


@inventory_group.command("list")
@click.option("--search", default=None, help="Match holder/gift name or code")
@click.option("--store-id", type=int, default=None)
@with_appcontext
def list_inventory(search, store_id):
    rows = query_service.all_inventory(search=search, store_id=store_id)
    if not rows:
        click.echo("No inventory found.")
        return
    click.echo(f"{'Holder':<20} {'Code':<8} {'Gift':<24} {'Qty':>5}")
    for row in rows:
        click.echo(
            f"{row['holder']['full_name']:<20} {row['holder']['employee_code']:<8} "
            f"{row['gift']['name']:<24} {row['quantity']:>5}"
        )


@click.group("requests")
def requests_group():
    """Request queue commands."""


@requests_group.command("pending")
@with_appcontext
def list_pending():
    rows = query_service.pending_requests()
    if not rows:
        click.echo("No pending requests.")
        return
    for row in rows:
        requester = row["requester"]["username"] if row["requester"] else "?"
        target = f" -> {row['target_holder']['username']}" if row["target_holder"] else ""
        gift = row["gift"]["code"] if row["gift"] else "?"
        click.echo(
            f"#{row['id']} {row['request_type']:<8} {requester}{target} "
            f"{gift} x{row['requested_quantity']} ({row['created_at']})"
        )


@click.group("ledger")
def ledger_group():
    """Ledger integrity commands."""


@ledger_group.command("verify")
@with_appcontext
def verify_ledger():
    """Exit non-zero when any balance disagrees with its ledger."""
    mismatches = inventory_service.reconcile()
    if not mismatches:
        click.echo("OK All balances match the ledger")
        return
    for m in mismatches:
        click.echo(
            f"MISMATCH holder={m['holder_id']} gift={m['gift_id']} "
            f"quantity={m['quantity']} ledger_sum={m['ledger_sum']}",
            err=True,
        )
    raise SystemExit(1)


@ledger_group.command("history")
@click.argument("holder_id", type=int)
@click.option("--limit", type=click.IntRange(min=1), default=20)
@with_appcontext
def ledger_history(holder_id, limit):
    for row in query_service.ledger_history(holder_id, limit=limit):
        gift = row["gift"]["code"] if row["gift"] else f"gift#{row['gift_id']}"
        click.echo(f"{row['created_at']} {row['kind']:<14} {gift:<8} {row['quantity']:>+5}  {row['reason'] or ''}")


def register_commands(app):
    app.cli.add_command(system_group)
    app.cli.add_command(inventory_group)
    app.cli.add_command(requests_group)
    app.cli.add_command(ledger_group)
