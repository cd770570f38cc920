# finance_tracker/cli.py
import logging
import os
from datetime import date

import click
from dotenv import load_dotenv

from finance_tracker import actions
from finance_tracker.aggregation import count_by_kind, group_for_listing
from finance_tracker.config import DEFAULT_CONFIG, load_config, save_config
from finance_tracker.core.categories import suggested_categories
from finance_tracker.core.models import TransactionKind
from finance_tracker.periods import Period, week_start_from_name

MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
               "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def _parse_month(value):
    """Accept a month number (1-12) or a short/long month name."""
    if value is None:
        return None
    text = str(value).strip()
    if text.isdigit():
        number = int(text)
        if 1 <= number <= 12:
            return number - 1
    else:
        for idx, name in enumerate(MONTH_NAMES):
            if text[:3].lower() == name.lower():
                return idx
    raise click.BadParameter(f"'{value}' is not a month.")


def _money(ctx, amount):
    return f"{ctx.obj['config']['currency_symbol']}{amount:,.2f}"


def _write_fields(kind, amount, category, occurred_at, description, image_url):
    return {
        'kind': kind,
        'amount': amount,
        'category': category,
        'occurred_at': occurred_at,
        'description': description,
        'image_url': image_url,
    }


def _report(result, verb):
    if not result.success:
        raise click.ClickException(result.error)
    tx = result.transaction
    if tx is None:
        click.echo(f"{verb} transaction.")
    else:
        click.echo(f"{verb} {tx.kind.value} {tx.id} ({tx.category}, {tx.occurred_at.isoformat()}).")


@click.group()
@click.option(
    '--config', 'config_path',
    default='config.yaml',
    type=click.Path(dir_okay=False),
    help='Path to config.yaml (defaults are used when it does not exist)'
)
@click.option(
    '--db', 'db_path',
    default=None,
    type=click.Path(dir_okay=False),
    help='SQLite database file (overrides config)'
)
@click.option(
    '--env-file', 'env_file',
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help='Optional .env file with FINANCE_TRACKER_* settings'
)
@click.pass_context
def main(ctx, config_path, db_path, env_file):
    """
    Record income and expenses and report on them by day, month, week or year.
    """
    if env_file:
        load_dotenv(env_file)

    cfg = load_config(config_path)
    logging.basicConfig(
        level=os.getenv('FINANCE_TRACKER_LOG_LEVEL', str(cfg['log_level'])).upper()
    )
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg
    ctx.obj['config_path'] = config_path
    ctx.obj['db_path'] = db_path or cfg['db_path']


@main.command()
@click.option('--force', is_flag=True, default=False, help='Overwrite an existing config file')
@click.pass_context
def init(ctx, force):
    """Write a config file with the default settings."""
    path = ctx.obj['config_path']
    if os.path.exists(path) and not force:
        raise click.ClickException(f"Config already exists at {path} (use --force to overwrite).")
    save_config(DEFAULT_CONFIG, path)
    click.echo(f"Wrote default config to {path}.")


@main.command()
@click.option('--type', 'kind', required=True,
              type=click.Choice([k.value for k in TransactionKind]))
@click.option('--amount', required=True, help='Positive amount')
@click.option('--category', required=True)
@click.option('--date', 'occurred_at', default=None, help='YYYY-MM-DD (default: today)')
@click.option('--description', default=None)
@click.option('--image-url', default=None)
@click.pass_context
def add(ctx, kind, amount, category, occurred_at, description, image_url):
    """Record a new transaction."""
    cfg = ctx.obj['config']
    fields = _write_fields(kind, amount, category,
                           occurred_at or date.today().isoformat(),
                           description, image_url)
    result = actions.add_transaction(
        ctx.obj['db_path'], fields,
        categories=cfg['categories'],
        strict_categories=bool(cfg['strict_categories']),
    )
    _report(result, 'Added')


@main.command()
@click.argument('transaction_id')
@click.option('--type', 'kind', required=True,
              type=click.Choice([k.value for k in TransactionKind]))
@click.option('--amount', required=True)
@click.option('--category', required=True)
@click.option('--date', 'occurred_at', required=True, help='YYYY-MM-DD')
@click.option('--description', default=None)
@click.option('--image-url', default=None)
@click.pass_context
def update(ctx, transaction_id, kind, amount, category, occurred_at, description, image_url):
    """Replace the fields of an existing transaction."""
    cfg = ctx.obj['config']
    fields = _write_fields(kind, amount, category, occurred_at, description, image_url)
    result = actions.update_transaction(
        ctx.obj['db_path'], transaction_id, fields,
        categories=cfg['categories'],
        strict_categories=bool(cfg['strict_categories']),
    )
    _report(result, 'Updated')


@main.command()
@click.argument('transaction_id')
@click.pass_context
def delete(ctx, transaction_id):
    """Delete a transaction by id."""
    result = actions.delete_transaction(ctx.obj['db_path'], transaction_id)
    _report(result, 'Deleted')


@main.command(name='list')
@click.option('--month', default=None, help='Month number or name (default: current month)')
@click.option('--year', type=click.IntRange(1, 9999), default=None, help='Year (default: current year)')
@click.option('--all', 'show_all', is_flag=True, default=False, help='List every transaction')
@click.pass_context
def list_transactions(ctx, month, year, show_all):
    """List transactions grouped by day, newest first."""
    today = date.today()
    month_idx = _parse_month(month)
    if show_all:
        txs = actions.get_transactions(ctx.obj['db_path'])
        scope = 'recorded'
    else:
        month_idx = today.month - 1 if month_idx is None else month_idx
        year = today.year if year is None else year
        txs = actions.get_transactions_by_month(ctx.obj['db_path'], month_idx, year)
        scope = f"in {MONTH_NAMES[month_idx]} {year}"

    if not txs:
        click.echo(f"No transactions {scope}.")
        return

    counts = count_by_kind(txs)
    click.echo(f"{counts['income']} income and {counts['expense']} expense transaction(s) {scope}.")
    for group in group_for_listing(txs):
        click.echo(f"\n{group.date}")
        for tx in group.transactions:
            sign = '+' if tx.kind is TransactionKind.INCOME else '-'
            line = f"  {sign}{_money(ctx, tx.amount):>14}  {tx.category:<20} {tx.id}"
            if tx.description:
                line += f"  {tx.description}"
            click.echo(line)


def _period_options(func):
    func = click.option('--date', 'reference', default=None,
                        type=click.DateTime(formats=['%Y-%m-%d']),
                        help='Reference date for weekly periods (default: today)')(func)
    func = click.option('--year', type=click.IntRange(1, 9999), default=None)(func)
    func = click.option('--month', default=None, help='Month number or name for monthly periods')(func)
    func = click.option('--period', default=Period.MONTHLY.value,
                        type=click.Choice([p.value for p in Period]))(func)
    return func


def _window_kwargs(ctx, month, year, reference):
    return {
        'month': _parse_month(month),
        'year': year,
        'reference': reference.date() if reference else None,
        'week_start': week_start_from_name(ctx.obj['config']['week_start']),
    }


@main.command()
@click.option('--all', 'show_all', is_flag=True, default=False,
              help='Summarize every transaction instead of one period')
@_period_options
@click.pass_context
def summary(ctx, show_all, period, month, year, reference):
    """Show income, expenses and balance."""
    if show_all:
        result = actions.get_summary(ctx.obj['db_path'])
    else:
        result = actions.get_summary_for_window(
            ctx.obj['db_path'], period, **_window_kwargs(ctx, month, year, reference)
        )
    click.echo(f"Income:   {_money(ctx, result.total_income)}")
    click.echo(f"Expenses: {_money(ctx, result.total_expenses)}")
    click.echo(f"Balance:  {_money(ctx, result.balance)}")


@main.command()
@_period_options
@click.pass_context
def stats(ctx, period, month, year, reference):
    """Show per-category statistics for a period."""
    data = actions.get_stats(
        ctx.obj['db_path'], period, **_window_kwargs(ctx, month, year, reference)
    )
    click.echo(data.date_range_label)
    sections = (
        ('Income', data.total_income, data.income_by_category),
        ('Expenses', data.total_expenses, data.expenses_by_category),
    )
    for title, total, rows in sections:
        click.echo(f"\n{title}: {_money(ctx, total)}")
        if not rows:
            click.echo("  (none)")
        for row in rows:
            click.echo(
                f"  {row.category:<20} {_money(ctx, row.amount):>14} "
                f"{row.percentage:6.1f}%  x{row.count}"
            )


@main.command()
@click.option('--month', default=None, help='Month number or name (default: current month)')
@click.option('--year', type=click.IntRange(1, 9999), default=None)
@click.pass_context
def calendar(ctx, month, year):
    """Show daily income, expense and balance for a month."""
    today = date.today()
    month_idx = _parse_month(month)
    month_idx = today.month - 1 if month_idx is None else month_idx
    year = today.year if year is None else year
    days = actions.get_calendar_data(ctx.obj['db_path'], month_idx, year)
    if not days:
        click.echo(f"No transactions in {MONTH_NAMES[month_idx]} {year}.")
        return
    for key, day in days.items():
        click.echo(
            f"{key}  +{_money(ctx, day.income):>12}  -{_money(ctx, day.expense):>12}  "
            f"={_money(ctx, day.balance):>12}  ({len(day.transactions)})"
        )


@main.command()
@click.option('--type', 'kind', default=None,
              type=click.Choice([k.value for k in TransactionKind]))
@click.pass_context
def categories(ctx, kind):
    """List the suggested categories."""
    kinds = [TransactionKind(kind)] if kind else list(TransactionKind)
    for k in kinds:
        click.echo(f"{k.value}:")
        for name in suggested_categories(k, ctx.obj['config']['categories']):
            click.echo(f"  {name}")


if __name__ == '__main__':
    main()
