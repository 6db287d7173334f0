# scripts/toggle_maintenance.py
"""Switch maintenance mode from the shell.

    python -m scripts.toggle_maintenance on --message "Update" --until "18:00"
    python -m scripts.toggle_maintenance off
    python -m scripts.toggle_maintenance status
"""
import argparse
import sys

from scripts import ScriptUtils


def build_parser():
    parser = argparse.ArgumentParser(description="Enable, disable or inspect maintenance mode.")
    parser.add_argument('--file', help="Flag file (defaults to MAINTENANCE_FILE from config)")
    sub = parser.add_subparsers(dest='command', required=True)

    on = sub.add_parser('on', help="Enable maintenance mode")
    on.add_argument('--message', help="Notice shown to visitors")
    on.add_argument('--until', help="Estimated end, free text or ISO timestamp")

    sub.add_parser('off', help="Disable maintenance mode")
    sub.add_parser('status', help="Show the current state")
    return parser


def _default_flag_file():
    ScriptUtils.setup_project_path()
    from config import Config

    return Config.MAINTENANCE_FILE


def main(argv=None):
    args = build_parser().parse_args(argv)

    ScriptUtils.setup_project_path()
    from portal.services.maintenance import MaintenanceStore

    store = MaintenanceStore(args.file or _default_flag_file())

    if args.command == 'on':
        status = store.enable(message=args.message, estimated_end=args.until)
        print(f"Maintenance enabled (revision {status.revision}): {status.message}")
    elif args.command == 'off':
        status = store.disable()
        print(f"Maintenance disabled (revision {status.revision})")
    else:
        status = store.read()
        state = 'enabled' if status.enabled else 'disabled'
        print(f"Maintenance {state} (revision {status.revision})")
        if status.enabled:
            print(f"Message: {status.message}")
            if status.estimated_end:
                print(f"Until:   {status.estimated_end}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
