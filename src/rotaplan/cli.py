"""Command-line interface for the rotaplan scheduling core."""

import argparse
import json
import logging
import sys
from collections import Counter
from datetime import date, timedelta
from pathlib import Path
from typing import Optional

from rotaplan.accounting.flextime import (
    ENTRY_TYPE_LABELS,
    FlexTimeCalculator,
    TimeEntryInput,
    default_end_time,
    default_start_time,
    format_flex_hours,
)
from rotaplan.domain.models import (
    EntryType,
    HolidayRecord,
    ManagerApproval,
    Partnership,
    RosterConfig,
    ShiftRequirement,
    ShiftTimeDefinition,
    ShiftType,
    TeamMember,
    WeekAssignment,
    Weekday,
    WorkerProfile,
    parse_time,
    shift_type_code,
)
from rotaplan.domain.patterns import parse_pattern, pattern_summary
from rotaplan.scheduling.bulk_scheduler import BulkMode, BulkScheduleConfig, BulkScheduler
from rotaplan.scheduling.calendar_classifier import CalendarClassifier
from rotaplan.scheduling.rotation_engine import ExpansionOptions, RotationPatternEngine
from rotaplan.scheduling.roster_generator import RosterGenerator
from rotaplan.scheduling.shift_resolver import ShiftTimeResolver
from rotaplan.store.memory import InMemoryStore
from rotaplan.validation.validator import ScheduleValidator

SAMPLE_PATTERNS = [
    {"type": "fixed_days", "cycle": {"work_days": 4, "off_days": 4, "shift_type": "early"}},
    {
        "type": "repeating_sequence",
        "sequence": [
            {"shift_type": "early", "days": 2},
            {"shift_type": "late", "days": 2},
            {"shift_type": "off", "days": 1},
        ],
    },
    {"type": "weekly_pattern", "pattern": {"monday": "early", "friday": "late"}},
    {"type": "custom", "cycle_length_days": 3, "days": [{"day": 0, "shift_type": "normal"}]},
]


def parse_date(value: str) -> date:
    return date.fromisoformat(value)


def load_json(path: str):
    with Path(path).open(encoding="utf-8") as f:
        return json.load(f)


def date_range(start: date, end: date) -> list[date]:
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]


def run_resolve(args: argparse.Namespace) -> int:
    """Resolve a shift time window from a JSON file of definitions."""
    records = load_json(args.definitions)
    definitions = [ShiftTimeDefinition.from_record(r) for r in records]

    classifier = CalendarClassifier(
        HolidayRecord(date=d, name="Holiday", country_code=args.country)
        for d in args.holiday
    )
    resolver = ShiftTimeResolver(definitions, classifier)
    resolved = resolver.resolve(
        ShiftType(args.shift_type),
        team_id=args.team,
        region_code=args.region,
        shift_date=args.date,
        explicit_definition_id=args.definition_id,
        country_code=args.country,
    )

    source = "built-in default" if resolved.is_default else f"definition {resolved.definition_id}"
    print(f"{args.shift_type} on {args.date}: {resolved.window} ({source})")
    if resolved.description:
        print(f"  {resolved.description}")
    return 0


def run_expand(args: argparse.Namespace) -> int:
    """Expand a JSON rotation pattern over a date range."""
    pattern = parse_pattern(load_json(args.pattern))
    options = ExpansionOptions(
        skip_weekends=args.skip_weekends,
        skip_holidays=args.skip_holidays,
        holidays=frozenset(args.holiday),
    )
    entries = RotationPatternEngine().expand(
        pattern, args.worker, args.team, date_range(args.start, args.end), options
    )

    print(f"Pattern: {pattern_summary(pattern)}")
    for entry in entries:
        code = shift_type_code(entry.shift_type, entry.activity_type)
        line = f"  {entry.date} {entry.date.strftime('%a')}  {code}"
        if entry.notes:
            line += f"  ({entry.notes})"
        print(line)

    work_days = sum(1 for e in entries if e.is_work)
    print(f"\n{work_days} work days, {len(entries) - work_days} off days")
    return 0


def run_flextime(args: argparse.Namespace) -> int:
    """Calculate flextime for one day and print break/limit findings."""
    entry_type = EntryType(args.type)
    start = parse_time(args.start) if args.start else default_start_time(entry_type)
    end = parse_time(args.end) if args.end else default_end_time(args.date, entry_type)
    entry = TimeEntryInput(
        entry_type=entry_type,
        start_time=start,
        end_time=end,
        break_minutes=args.break_minutes,
        withdrawal_hours=args.withdrawal,
    )

    calculator = FlexTimeCalculator()
    result = calculator.calculate(args.date, entry)

    print(f"{ENTRY_TYPE_LABELS[entry_type]} on {args.date} ({args.date.strftime('%A')})")
    print(f"  Target: {result.target_hours:.2f} h")
    print(f"  Actual: {result.actual_hours:.2f} h")
    print(f"  Delta:  {format_flex_hours(result.flex_delta)}")

    validation = ScheduleValidator(calculator.policy).validate_time_entry(
        args.worker, args.date, entry, result
    )
    if validation.is_valid:
        print("\n  Validation: PASSED")
        return 0

    print(f"\n  Validation: FAILED ({len(validation.errors)} errors)")
    for error in validation.errors:
        print(f"    - {error}")
    return 1


def build_demo_store(start: date) -> InMemoryStore:
    """Two teams sharing a four-week on-call roster."""
    store = InMemoryStore()
    workers = [
        ("W1", "Anna", "Berg", "T1", "DE", "BY"),
        ("W2", "Ben", "Keller", "T1", "DE", "BY"),
        ("W3", "Clara", "Novak", "T2", "DE", "BE"),
        ("W4", "David", "Lang", "T2", "AT", None),
    ]
    for worker_id, first, last, team_id, country, region in workers:
        store.add_profile(
            WorkerProfile(worker_id, first, last, country, region, team_ids=[team_id])
        )
        store.team_members.append(TeamMember(worker_id, team_id, country, region))

    store.partnerships["P1"] = Partnership("P1", "Platform on-call", ("T1", "T2"))
    store.definitions.extend([
        ShiftTimeDefinition.from_record({
            "id": "late-t1", "shift_type": "late", "start_time": "13:00",
            "end_time": "21:00", "team_id": "T1", "description": "Team 1 late",
        }),
        ShiftTimeDefinition.from_record({
            "id": "late-fri", "shift_type": "late", "start_time": "12:00",
            "end_time": "18:00", "team_id": "T1", "region_code": "BY",
            "day_of_week": [Weekday.FRIDAY], "description": "Short Friday late",
        }),
        ShiftTimeDefinition.from_record({
            "id": "weekend-de", "shift_type": "weekend", "start_time": "09:00",
            "end_time": "17:00", "country_codes": ["DE"],
            "description": "Weekend on-call (DE)",
        }),
    ])
    store.holidays.extend([
        HolidayRecord(date=start + timedelta(days=2), name="Company Day", country_code="DE"),
        HolidayRecord(
            date=start + timedelta(weeks=8, days=1),
            name="Moving day",
            owner_id="W2",
            is_public=False,
        ),
    ])

    roster = RosterConfig(
        id="R1",
        shift_type="late",
        cycle_length_weeks=4,
        start_date=start,
        partnership_id="P1",
        end_date=start + timedelta(weeks=8, days=-1),
    )
    assignments = [
        WeekAssignment(1, "T1", "W1", "late"),
        WeekAssignment(2, "T1", "W2", "weekend_late"),
        WeekAssignment(3, "T2", "W3", "early"),
        WeekAssignment(4, "T2", "W4", "weekend"),
    ]
    approvals = [
        ManagerApproval("M1", "Maria Hahn", approved=True),
        ManagerApproval("M2", "Jonas Roth", approved=False),
    ]
    store.add_roster(roster, assignments, approvals)
    return store


def run_demo(weeks_ahead: int = 1) -> int:
    """Generate a sample roster into an in-memory store."""
    today = date.today()
    start = today - timedelta(days=today.weekday()) + timedelta(weeks=weeks_ahead)
    store = build_demo_store(start)
    generator = RosterGenerator(store)

    approval = generator.validate_approvals("R1")
    if approval.all_approved:
        print("Approvals: complete")
    else:
        print(f"Approvals: pending ({', '.join(approval.pending_managers)})")

    roster = store.get_roster("R1")
    staffing = ScheduleValidator().validate_staffing(
        [ShiftRequirement(ShiftType.LATE, 1), ShiftRequirement(ShiftType.WEEKEND, 1)],
        store.get_week_assignments("R1"),
        roster.cycle_length_weeks,
    )
    if staffing.is_valid:
        print("Staffing: PASSED")
    else:
        print(f"Staffing: {len(staffing.errors)} gaps")
        for error in staffing.errors:
            print(f"    - {error}")

    print(f"\nGenerating roster R1 from {roster.start_date} to {roster.end_date}...")
    result = generator.generate_for_roster("R1", requested_by="demo")
    if not result.success:
        print(f"  FAILED after {result.entries_created} entries: {result.error}")
        return 1

    print(f"  Created {result.entries_created} entries")
    print(f"  Roster status: {store.get_roster('R1').status.value}")

    per_worker = Counter(e.worker_id for e in store.schedule_entries.values())
    for worker_id, count in sorted(per_worker.items()):
        profile = store.profiles[worker_id]
        codes = Counter(
            shift_type_code(e.shift_type, e.activity_type)
            for e in store.schedule_entries.values()
            if e.worker_id == worker_id
        )
        summary = ", ".join(f"{code}={n}" for code, n in sorted(codes.items()))
        print(f"    {profile.display_name:<14} {count:3d} days ({summary})")

    bulk_config = BulkScheduleConfig(
        team_id="T1",
        start_date=roster.end_date + timedelta(days=1),
        end_date=roster.end_date + timedelta(weeks=1),
        shift_definition_id="late-t1",
        mode=BulkMode.TEAM,
        auto_detect_weekends=True,
        skip_workers_with_holidays=True,
    )
    print(
        f"\nBulk scheduling team T1 from {bulk_config.start_date} "
        f"to {bulk_config.end_date}..."
    )
    bulk = BulkScheduler(store).schedule(bulk_config, created_by="demo")
    if not bulk.success:
        print(f"  FAILED after {bulk.entries_created} entries: {bulk.error}")
        return 1
    print(f"  Created {bulk.entries_created} entries")

    print("\nRotation patterns:")
    for raw in SAMPLE_PATTERNS:
        print(f"  {raw['type']:<20} {pattern_summary(parse_pattern(raw))}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rotaplan",
        description="Rotaplan - Shift Rotation and Flextime Tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s demo                                   Generate a sample roster
  %(prog)s resolve defs.json late --date 2024-01-19 --team T1
  %(prog)s expand pattern.json --start 2024-01-01 --end 2024-01-31 --skip-weekends
  %(prog)s flextime --date 2024-01-17 --start 08:00 --end 17:00 --break 60
        """,
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Resolve command
    resolve_parser = subparsers.add_parser("resolve", help="Resolve a shift time window")
    resolve_parser.add_argument("definitions", help="JSON file with shift time definitions")
    resolve_parser.add_argument(
        "shift_type",
        choices=[s.value for s in ShiftType],
        help="Shift type to resolve",
    )
    resolve_parser.add_argument("--date", type=parse_date, required=True, help="Shift date")
    resolve_parser.add_argument("--team", help="Team id")
    resolve_parser.add_argument("--region", help="Region code")
    resolve_parser.add_argument("--country", help="Country code")
    resolve_parser.add_argument("--definition-id", help="Explicit definition id")
    resolve_parser.add_argument(
        "--holiday",
        type=parse_date,
        action="append",
        default=[],
        help="Public holiday date (repeatable)",
    )

    # Expand command
    expand_parser = subparsers.add_parser("expand", help="Expand a rotation pattern")
    expand_parser.add_argument("pattern", help="JSON file with the pattern config")
    expand_parser.add_argument("--start", type=parse_date, required=True, help="First date")
    expand_parser.add_argument("--end", type=parse_date, required=True, help="Last date")
    expand_parser.add_argument("--worker", default="W1", help="Worker id (default: W1)")
    expand_parser.add_argument("--team", default="T1", help="Team id (default: T1)")
    expand_parser.add_argument(
        "--skip-weekends",
        action="store_true",
        help="Mark Saturdays and Sundays unavailable (fixed-days patterns)",
    )
    expand_parser.add_argument(
        "--skip-holidays",
        action="store_true",
        help="Mark --holiday dates unavailable (fixed-days patterns)",
    )
    expand_parser.add_argument(
        "--holiday",
        type=parse_date,
        action="append",
        default=[],
        help="Holiday date (repeatable)",
    )

    # Flextime command
    flex_parser = subparsers.add_parser("flextime", help="Calculate flextime for a day")
    flex_parser.add_argument("--date", type=parse_date, required=True, help="Work date")
    flex_parser.add_argument(
        "--type", "-t",
        default=EntryType.WORK.value,
        choices=[t.value for t in EntryType],
        help="Entry type (default: work)",
    )
    flex_parser.add_argument("--start", help="Start time HH:MM (default: 08:00)")
    flex_parser.add_argument("--end", help="End time HH:MM (default: target plus break)")
    flex_parser.add_argument(
        "--break", "-b",
        dest="break_minutes",
        type=int,
        default=30,
        help="Break minutes (default: 30)",
    )
    flex_parser.add_argument("--withdrawal", type=float, help="FZA withdrawal hours")
    flex_parser.add_argument("--worker", default="W1", help="Worker id (default: W1)")

    # Demo command
    demo_parser = subparsers.add_parser("demo", help="Generate a sample roster")
    demo_parser.add_argument(
        "--weeks-ahead", "-w",
        type=int,
        default=1,
        help="Weeks from now until the roster starts (default: 1)",
    )

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "resolve":
        return run_resolve(args)
    elif args.command == "expand":
        return run_expand(args)
    elif args.command == "flextime":
        return run_flextime(args)
    elif args.command == "demo":
        return run_demo(args.weeks_ahead)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
