#!/usr/bin/env python3
"""
Utility script to view the marketplace audit trail.

Usage:
    python scripts/view_audit_log.py                  # Last 50 entries
    python scripts/view_audit_log.py --limit 200      # Last 200 entries
    python scripts/view_audit_log.py --record DEM-... # Entries for one listing
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from timber_market.config import get_config_manager
from timber_market.database import create_database_manager
from timber_market.utils import get_audit_logger


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="View the timber marketplace audit log",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                          # Last 50 entries
  %(prog)s --limit 200              # Last 200 entries
  %(prog)s --record STK-1718000000000-3fa29c1e
  %(prog)s --grep ai_request        # Only AI requests
        """
    )
    parser.add_argument('--db', help='Database path (default: database.path from config)')
    parser.add_argument('--limit', type=int, default=50, help='Number of entries (default: 50)')
    parser.add_argument('--record', metavar='ID', help='Only entries for this demand or stock ID')
    parser.add_argument('--grep', metavar='PATTERN', help='Only entries whose line or action type contains PATTERN (case-insensitive)')
    args = parser.parse_args()

    db_path = args.db or get_config_manager().get("database.path", "data/timber_market.db")
    if not Path(db_path).exists():
        print(f"Error: database not found: {db_path}", file=sys.stderr)
        sys.exit(1)

    audit_logger = get_audit_logger(create_database_manager(db_path))

    if args.record:
        entries = audit_logger.get_entries_for_record(args.record, args.limit)
    else:
        entries = audit_logger.get_recent_entries(args.limit)

    for entry in entries:
        line = entry.to_readable_string()
        if args.grep and args.grep.lower() not in f"{entry.action_type.value} {line}".lower():
            continue
        print(line)


if __name__ == '__main__':
    main()
