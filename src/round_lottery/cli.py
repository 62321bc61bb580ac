from __future__ import annotations

import argparse
import json
import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator

from .accounts import load_accounts, normalize_account
from .config import Settings
from .contract import LotteryContract
from .draw import predict_draw
from .environment import LocalEnvironment, TimeSource, wall_clock
from .errors import LotteryError, TransferError
from .rpc import RpcClient, rpc_time_source
from .store import StoredState, load_state, save_state
from .verify import build_audit, verify_audit


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def fmt_ts(ts: int) -> str:
    try:
        return datetime.fromtimestamp(ts, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")
    except (ValueError, OverflowError, OSError):
        # Outside what datetime can represent, e.g. a millisecond timestamp.
        return str(ts)


@contextmanager
def open_clock(args: argparse.Namespace, settings: Settings) -> Iterator[TimeSource]:
    if args.now is not None:
        fixed = int(args.now)
        yield lambda: fixed
        return
    if not settings.rpc_url:
        yield wall_clock
        return

    rpc = RpcClient(settings.rpc_url, timeout_s=args.timeout)
    try:
        yield rpc_time_source(rpc)
    finally:
        rpc.close()


def load_stored(args: argparse.Namespace, clock: TimeSource) -> StoredState:
    stored = load_state(args.settings.state_file, clock=clock)
    if stored is None:
        raise SystemExit(
            f"No round found in {args.settings.state_file}. Run `init` first."
        )
    return stored


def account(args: argparse.Namespace, address: str) -> str:
    try:
        return normalize_account(address, args.settings.ss58_prefix)
    except ValueError as e:
        raise SystemExit(f"Invalid account: {e}")


def cmd_init(args: argparse.Namespace, clock: TimeSource) -> int:
    log = logging.getLogger("init")
    if load_state(args.settings.state_file, clock=clock) is not None and not args.force:
        raise SystemExit(
            f"{args.settings.state_file} already holds a round (use --force to replace it)."
        )

    env = LocalEnvironment(clock=clock, caller=account(args, args.organizer))
    try:
        contract = LotteryContract.create(
            env, ticket_price=args.ticket_price, close_time=args.close_time
        )
    except ValueError as e:
        raise SystemExit(f"Invalid round: {e}")
    env.caller = ""
    save_state(args.settings.state_file, StoredState(round=contract.round, env=env))
    log.info("State written to %s", args.settings.state_file)

    print(f"Organizer     : {contract.round.organizer}")
    print(f"Ticket price  : {contract.ticket_price}")
    print(f"Closes at     : {fmt_ts(contract.close_time)}")
    return 0


def cmd_fund(args: argparse.Namespace, clock: TimeSource) -> int:
    if args.amount <= 0:
        raise SystemExit(f"Funding amount must be positive, got {args.amount}.")
    stored = load_stored(args, clock)
    targets = []
    if args.account:
        targets.append(account(args, args.account))
    if args.accounts_file:
        try:
            targets.extend(load_accounts(args.accounts_file, args.settings.ss58_prefix))
        except ValueError as e:
            raise SystemExit(f"Invalid account in {args.accounts_file}: {e}")
    if not targets:
        raise SystemExit("Nothing to fund: pass --account and/or --accounts-file.")

    for a in targets:
        stored.env.credit(a, args.amount)
        print(f"{a}: {stored.env.balances[a]}")
    save_state(args.settings.state_file, stored)
    return 0


def cmd_buy(args: argparse.Namespace, clock: TimeSource) -> int:
    stored = load_stored(args, clock)
    contract = LotteryContract(stored.env, stored.round)
    buyer = account(args, args.account)
    amount = contract.ticket_price if args.amount is None else args.amount

    with stored.env.invoke(buyer, amount):
        contract.buy_ticket()

    stored.round = contract.round
    save_state(args.settings.state_file, stored)
    print(f"Ticket #{len(contract.round.participants)} for {buyer}")
    print(f"Pool          : {contract.pool_total()}")
    return 0


def cmd_pool(args: argparse.Namespace, clock: TimeSource) -> int:
    stored = load_stored(args, clock)
    print(LotteryContract(stored.env, stored.round).pool_total())
    return 0


def cmd_time_left(args: argparse.Namespace, clock: TimeSource) -> int:
    stored = load_stored(args, clock)
    contract = LotteryContract(stored.env, stored.round)
    left = contract.time_remaining()
    print(f"Closes at     : {fmt_ts(contract.close_time)}")
    print(f"Seconds left  : {left}")
    print(f"Drawable      : {'yes' if left == 0 else 'no'}")
    return 0


def cmd_draw(args: argparse.Namespace, clock: TimeSource) -> int:
    log = logging.getLogger("draw")
    stored = load_stored(args, clock)
    contract = LotteryContract(stored.env, stored.round)
    round_before = contract.round

    outcome = contract.draw()

    stored.round = contract.round
    save_state(args.settings.state_file, stored)

    audit = build_audit(round_before, outcome)
    with open(args.out, "w", encoding="utf-8") as f:
        json.dump(audit, f, indent=2)
    log.info("Audit written to %s", args.out)

    print("========================================")
    print("LOTTERY DRAW")
    print("========================================")
    print(f"Draw time     : {fmt_ts(outcome.timestamp)}")
    print(f"Seed counter  : {outcome.seed_counter}")
    print(f"Participants  : {outcome.participant_count}")
    print(f"Random index  : {outcome.index}")
    print("----------------------------------------")
    print("WINNER")
    print(f"Address       : {outcome.winner}")
    if outcome.organizer_fallback:
        print("               (organizer fallback)")
    print(f"Prize         : {outcome.amount}")
    print("----------------------------------------")
    print(f"Next round    : closes {fmt_ts(contract.close_time)}")
    print(f"Wrote audit   : {args.out}")
    return 0


def cmd_verify(args: argparse.Namespace, clock: TimeSource) -> int:
    result = verify_audit(args.audit)
    print("AUDIT VERIFIED")
    print(f"Winner        : {result['winner']}")
    print(f"Random index  : {result['random_index']}")
    print(f"Participants  : {result['participant_count']}")
    print(f"Prize         : {result['pool']}")
    return 0


def cmd_predict(args: argparse.Namespace, clock: TimeSource) -> int:
    """Shows who a draw at a given time would pay, given the current tickets."""
    stored = load_stored(args, clock)
    at_time = clock() if args.at is None else args.at
    outcome = predict_draw(stored.round, at_time)

    print("--- DRAW PREDICTION ---")
    print(f"Draw time     : {fmt_ts(at_time)} ({at_time})")
    print(f"Round closes  : {fmt_ts(stored.round.close_time)}")
    if at_time < stored.round.close_time:
        print("Note          : round is still open at that time, a draw would be rejected")
    print(f"Random index  : {outcome.index} of {outcome.participant_count + 1} values")
    print(f"Winner        : {outcome.winner}")
    print(f"Prize         : {outcome.amount}")
    return 0


def cmd_set_code(args: argparse.Namespace, clock: TimeSource) -> int:
    stored = load_stored(args, clock)
    try:
        code_hash = bytes.fromhex(args.code_hash.removeprefix("0x"))
    except ValueError:
        raise SystemExit(f"Code hash is not hex: {args.code_hash}")

    LotteryContract(stored.env, stored.round).set_code(code_hash)
    save_state(args.settings.state_file, stored)
    print(f"Code hash     : 0x{code_hash.hex()}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="round-lottery",
        description="Round-based lottery: sell tickets, draw a winner, reset.",
    )
    p.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    p.add_argument("--state-file", default=None, help="Override state file (else use env).")
    p.add_argument("--rpc-url", default=None, help="Node RPC URL used as time source.")
    p.add_argument("--timeout", type=float, default=60.0, help="RPC timeout seconds.")
    p.add_argument(
        "--now", type=int, default=None, help="Pin the current time (unix seconds)."
    )

    sub = p.add_subparsers(dest="cmd", required=True)

    i = sub.add_parser("init", help="Create a new round.")
    i.add_argument("--organizer", required=True, help="Organizer account (SS58).")
    i.add_argument("--ticket-price", type=int, default=None, help="Defaults to 100.")
    i.add_argument(
        "--close-time", type=int, default=None, help="Unix seconds; defaults to now + 7 days."
    )
    i.add_argument("--force", action="store_true", help="Replace an existing round.")
    i.set_defaults(func=cmd_init)

    f = sub.add_parser("fund", help="Credit accounts in the local ledger.")
    f.add_argument("--account", default=None, help="Account to credit.")
    f.add_argument(
        "--accounts-file", default=None, help="File with one account per line."
    )
    f.add_argument("--amount", type=int, required=True)
    f.set_defaults(func=cmd_fund)

    b = sub.add_parser("buy", help="Buy one ticket.")
    b.add_argument("--account", required=True, help="Buyer account (SS58).")
    b.add_argument(
        "--amount", type=int, default=None, help="Value to attach; defaults to ticket price."
    )
    b.set_defaults(func=cmd_buy)

    sub.add_parser("pool", help="Print the prize pool.").set_defaults(func=cmd_pool)
    sub.add_parser("time-left", help="Print time until the round may be drawn.").set_defaults(
        func=cmd_time_left
    )

    d = sub.add_parser("draw", help="Draw the winner, pay out and reset the round.")
    d.add_argument("--out", default="draw_audit.json", help="Audit output JSON path.")
    d.set_defaults(func=cmd_draw)

    v = sub.add_parser("verify", help="Re-derive the winner of an audit file.")
    v.add_argument("--audit", required=True, help="Path to draw_audit.json.")
    v.set_defaults(func=cmd_verify)

    pr = sub.add_parser("predict", help="Compute the winner of a draw at a given time.")
    pr.add_argument("--at", type=int, default=None, help="Unix seconds; defaults to now.")
    pr.set_defaults(func=cmd_predict)

    s = sub.add_parser("set-code", help="Switch the deployed logic to a new code hash.")
    s.add_argument("--code-hash", required=True, help="32-byte hex code hash.")
    s.set_defaults(func=cmd_set_code)

    return p


def main(argv=None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)
    args.settings = Settings.from_env(
        state_file_override=args.state_file, rpc_url_override=args.rpc_url
    )

    with open_clock(args, args.settings) as clock:
        try:
            code = args.func(args, clock)
        except (LotteryError, TransferError) as e:
            raise SystemExit(f"Rejected: {e}")
    raise SystemExit(code)
