"""Goalfolio CLI.

Provides commands for:
- register / login / logout / whoami: local sign-in
- stocks / formations / presets: browse the catalogs
- formation / preset / add / edit / remove: build the lineup
- refresh / stats / dividends: simulated prices and portfolio statistics
- save / list / load / delete: named portfolios

The working lineup is carried between invocations by the autosave record, so
lineup commands need a signed-in user.
"""
from __future__ import annotations

import argparse
import logging
from datetime import date
from typing import Optional

from common.config_loader import CONFIG_DIR, load_all
from common.errors import GoalfolioError, ValidationError
from engine.dividend_engine import PRORATED, QUARTERLY, monthly_dividends
from portfolio.holding import POSITION_TYPES, RISK_TIERS
from reporting.summary import (
    dividend_summary,
    format_currency,
    holdings_frame,
    monthly_frame,
)
from session.workspace import Workspace
from storage.backend import JsonFileBackend


def build_workspace(args) -> Workspace:
    """Build a workspace from the configuration files and restore the lineup."""
    cfg = load_all(
        args.config,
        CONFIG_DIR / "stock_universe.yaml",
        CONFIG_DIR / "formations.yaml",
        CONFIG_DIR / "presets.yaml",
    )
    backend = JsonFileBackend(args.data_dir) if args.data_dir else None
    ws = Workspace.from_config(cfg, backend=backend)
    ws.start(poll_market=False)
    return ws


def _money(ws: Workspace, amount: float, currency: str = "USD") -> str:
    return format_currency(amount, currency, ws.simulator.usd_to_krw)


def _require_sign_in(ws: Workspace) -> None:
    if ws.user is None:
        raise ValidationError("Not signed in. Run 'login' or 'register' first.")


def cmd_register(ws: Workspace, args) -> int:
    if not ws.register(args.email, args.password, args.name):
        print("Error: email already registered")
        return 1
    print(f"Registered and signed in as {ws.user.display_name} <{ws.user.email}>")
    return 0


def cmd_login(ws: Workspace, args) -> int:
    if not ws.login(args.email, args.password):
        print("Error: email or password is incorrect")
        return 1
    print(f"Signed in as {ws.user.display_name} <{ws.user.email}>")
    return 0


def cmd_logout(ws: Workspace, args) -> int:
    ws.logout()
    print("Signed out.")
    return 0


def cmd_whoami(ws: Workspace, args) -> int:
    if ws.user is None:
        print("Guest (not signed in)")
        return 0
    print(f"{ws.user.display_name} <{ws.user.email}>  id={ws.user.id}")
    return 0


def cmd_stocks(ws: Workspace, args) -> int:
    quotes = ws.search(args.term) if args.term else ws.universe.quotes()
    if not quotes:
        print("No matching stocks.")
        return 0
    for q in quotes:
        print(f"  {q.ticker:6} {q.name:32} {q.risk_tier:6} {_money(ws, q.current_price):>12}  yield {q.dividend_yield:.2f}%")
    return 0


def cmd_formations(ws: Workspace, args) -> int:
    current = ws.portfolio.formation.code
    for f in ws.catalog.formations:
        marker = "*" if f.code == current else " "
        counts = "/".join(str(f.slot_count(pt)) for pt in POSITION_TYPES)
        print(f" {marker} {f.code:5} {f.name:8} slots {counts}")
    return 0


def cmd_formation(ws: Workspace, args) -> int:
    _require_sign_in(ws)
    ws.change_formation(args.code)
    print(f"Formation set to {ws.portfolio.formation.name}; lineup cleared.")
    return 0


def cmd_presets(ws: Workspace, args) -> int:
    for p in ws.presets:
        print(f"  {p.name} ({p.formation}): {p.description}")
    return 0


def cmd_preset(ws: Workspace, args) -> int:
    _require_sign_in(ws)
    holdings = ws.apply_preset(args.name)
    print(f"Applied {args.name}: {len(holdings)} holdings on {ws.portfolio.formation.name}")
    return 0


def cmd_lineup(ws: Workspace, args) -> int:
    f = ws.portfolio.formation
    print(f"Formation {f.name}")
    print("=" * 50)
    for pt in POSITION_TYPES:
        print(f"\n{pt.title()}s:")
        for i in range(f.slot_count(pt)):
            h = ws.portfolio.holding_at(pt, i)
            if h is None:
                print(f"  [{i}] (empty)")
            else:
                print(f"  [{i}] {h.ticker:6} {h.shares:g} sh @ {_money(ws, h.purchase_price)}  tier {h.risk_tier}  id={h.id}")
    return 0


def cmd_add(ws: Workspace, args) -> int:
    _require_sign_in(ws)
    quote = ws.universe.get(args.ticker)
    price = args.price if args.price is not None else quote.current_price
    h = ws.assign(args.position, args.slot, args.ticker, args.shares, price, args.date, args.tier)
    print(f"Placed {h.ticker} at {h.id}: {h.shares:g} shares @ {_money(ws, h.purchase_price)}")
    return 0


def cmd_edit(ws: Workspace, args) -> int:
    _require_sign_in(ws)
    current = ws.portfolio.get(args.id)
    h = ws.edit(
        args.id,
        args.shares if args.shares is not None else current.shares,
        args.price if args.price is not None else current.purchase_price,
        args.date or current.purchase_date,
        args.tier,
    )
    print(f"Updated {h.id}: {h.ticker} {h.shares:g} shares @ {_money(ws, h.purchase_price)} ({h.risk_tier})")
    return 0


def cmd_remove(ws: Workspace, args) -> int:
    _require_sign_in(ws)
    if not ws.remove(args.id):
        print(f"Error: no holding in slot {args.id}")
        return 1
    print(f"Removed {args.id}")
    return 0


def cmd_refresh(ws: Workspace, args) -> int:
    _require_sign_in(ws)
    for _ in range(args.times):
        ws.refresh_market()
    for h in sorted(ws.portfolio.holdings, key=lambda x: x.ticker):
        print(f"  {h.ticker:6} {_money(ws, h.current_price):>12}  {h.price_change:+.2f} ({h.price_change_percent:+.2f}%)")
    print(f"\nUSD/KRW: {ws.simulator.usd_to_krw:,.0f}")
    return 0


def cmd_stats(ws: Workspace, args) -> int:
    s = ws.summary()
    r = s["returns"]
    cur = args.currency
    print(f"Portfolio ({ws.portfolio.formation.name})")
    print("=" * 50)
    print(f"  Invested:       {_money(ws, r.total_invested, cur)}")
    print(f"  Current value:  {_money(ws, r.total_current, cur)}")
    print(f"  Return:         {_money(ws, r.total_return, cur)} ({r.return_percent:+.2f}%)")
    print(f"  Annual dividend (cost):   {_money(ws, s['dividends'].total_annual, cur)}")
    print(f"  Annual dividend (market): {_money(ws, r.annual_dividend_at_market, cur)}")

    print("\nPositions:")
    for pt, tw in s["positions"].items():
        print(f"  {pt:10} {tw.weight:6.1f}%  {tw.count} holdings  {_money(ws, tw.value, cur)}")

    print("\nTop holdings:")
    for w in s["top_holdings"]:
        print(f"  {w.ticker:6} {w.weight:6.1f}%")

    print("\nSectors:")
    for sw in s["sectors"]:
        print(f"  {sw.sector:24} {sw.weight:6.1f}%")

    if args.table:
        df = holdings_frame(ws.portfolio.holdings)
        print()
        print(df.to_string(index=False) if not df.empty else "No holdings.")
    return 0


def cmd_dividends(ws: Workspace, args) -> int:
    schedule = monthly_dividends(ws.portfolio.holdings, mode=PRORATED if args.prorated else QUARTERLY)
    summary = dividend_summary(schedule)
    print(monthly_frame(schedule).to_string(index=False))
    print(f"\nProjected total: {_money(ws, summary['total'], args.currency)} over {summary['paying_months']} months")
    return 0


def cmd_save(ws: Workspace, args) -> int:
    pid = ws.save_as(args.name)
    print(f"Saved {args.name!r} as {pid}")
    return 0


def cmd_list(ws: Workspace, args) -> int:
    records = ws.saved()
    if not records:
        print("No saved portfolios.")
        return 0
    for r in records:
        print(f"  {r.id}  {r.name:24} {r.formation:5} {len(r.holdings):2} holdings  {_money(ws, r.total_value):>14}  updated {r.updated_at}")
    return 0


def cmd_load(ws: Workspace, args) -> int:
    rec = ws.load(args.id)
    print(f"Loaded {rec.name!r} ({len(ws.portfolio.holdings)} holdings)")
    return 0


def cmd_delete(ws: Workspace, args) -> int:
    if not ws.delete(args.id):
        print(f"Error: no saved portfolio {args.id}")
        return 1
    print(f"Deleted {args.id}")
    return 0


def run(args, ws: Optional[Workspace] = None) -> int:
    """Run one parsed command against a workspace, flushing autosave at the end."""
    try:
        if ws is None:
            ws = build_workspace(args)
        return args.func(ws, args)
    except GoalfolioError as e:
        print(f"Error: {e}")
        return 1
    finally:
        if ws is not None:
            ws.close()


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="goalfolio",
        description="Goalfolio CLI: a football-formation view of a stock portfolio",
    )
    p.add_argument("--config", default=str(CONFIG_DIR / "settings.yaml"), help="Settings file")
    p.add_argument("--data-dir", default=None, help="Storage directory (overrides settings)")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    reg = sub.add_parser("register", help="Create an account and sign in")
    reg.add_argument("--email", required=True)
    reg.add_argument("--password", required=True)
    reg.add_argument("--name", required=True)
    reg.set_defaults(func=cmd_register)

    login = sub.add_parser("login", help="Sign in")
    login.add_argument("--email", required=True)
    login.add_argument("--password", required=True)
    login.set_defaults(func=cmd_login)

    sub.add_parser("logout", help="Sign out").set_defaults(func=cmd_logout)
    sub.add_parser("whoami", help="Show the signed-in user").set_defaults(func=cmd_whoami)

    stocks = sub.add_parser("stocks", help="List or search stocks")
    stocks.add_argument("term", nargs="?", default="", help="Ticker or name fragment")
    stocks.set_defaults(func=cmd_stocks)

    sub.add_parser("formations", help="List formations").set_defaults(func=cmd_formations)

    form = sub.add_parser("formation", help="Switch formation (clears the lineup)")
    form.add_argument("code", help="Formation code, e.g. 533")
    form.set_defaults(func=cmd_formation)

    sub.add_parser("presets", help="List recommended portfolios").set_defaults(func=cmd_presets)

    preset = sub.add_parser("preset", help="Apply a recommended portfolio")
    preset.add_argument("name")
    preset.set_defaults(func=cmd_preset)

    sub.add_parser("lineup", help="Show the lineup slot by slot").set_defaults(func=cmd_lineup)

    add = sub.add_parser("add", help="Place a stock in a slot")
    add.add_argument("--position", choices=POSITION_TYPES, required=True)
    add.add_argument("--slot", type=int, required=True, help="Slot index within the position")
    add.add_argument("--ticker", required=True)
    add.add_argument("--shares", type=float, required=True)
    add.add_argument("--price", type=float, default=None, help="Purchase price (default: current price)")
    add.add_argument("--date", default=date.today().isoformat(), help="Purchase date YYYY-MM-DD")
    add.add_argument("--tier", choices=RISK_TIERS, default=None, help="Risk tier (default: stock's tier)")
    add.set_defaults(func=cmd_add)

    edit = sub.add_parser("edit", help="Edit a holding")
    edit.add_argument("id", help="Holding id, e.g. defender-0")
    edit.add_argument("--shares", type=float, default=None)
    edit.add_argument("--price", type=float, default=None)
    edit.add_argument("--date", default=None)
    edit.add_argument("--tier", choices=RISK_TIERS, default=None)
    edit.set_defaults(func=cmd_edit)

    rm = sub.add_parser("remove", help="Remove a holding")
    rm.add_argument("id")
    rm.set_defaults(func=cmd_remove)

    refresh = sub.add_parser("refresh", help="Simulate market moves")
    refresh.add_argument("--times", type=int, default=1)
    refresh.set_defaults(func=cmd_refresh)

    stats = sub.add_parser("stats", help="Portfolio statistics")
    stats.add_argument("--currency", choices=["USD", "KRW"], default="USD")
    stats.add_argument("--table", action="store_true", help="Include the per-holding table")
    stats.set_defaults(func=cmd_stats)

    divs = sub.add_parser("dividends", help="Monthly dividend projection")
    divs.add_argument("--currency", choices=["USD", "KRW"], default="USD")
    divs.add_argument("--prorated", action="store_true", help="Spread annual dividends over payment months")
    divs.set_defaults(func=cmd_dividends)

    save = sub.add_parser("save", help="Save the lineup under a name")
    save.add_argument("name")
    save.set_defaults(func=cmd_save)

    sub.add_parser("list", help="List saved portfolios").set_defaults(func=cmd_list)

    load = sub.add_parser("load", help="Load a saved portfolio")
    load.add_argument("id")
    load.set_defaults(func=cmd_load)

    delete = sub.add_parser("delete", help="Delete a saved portfolio")
    delete.add_argument("id")
    delete.set_defaults(func=cmd_delete)

    return p


def main():
    """Main entry point."""
    args = build_parser().parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    raise SystemExit(run(args))


if __name__ == "__main__":
    main()
