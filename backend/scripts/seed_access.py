#!/usr/bin/env python
"""Idempotent seed script for the section catalog, roles and admin account.

Usage:
    python backend/scripts/seed_access.py                 # seed normally
    python backend/scripts/seed_access.py --show-access   # print role -> resolved sections after seeding
    python backend/scripts/seed_access.py --dry-run       # run logic then rollback (no DB changes)
    python backend/scripts/seed_access.py --export-json   # dump GET /permissions/sections payload
"""
from __future__ import annotations
import os, sys, argparse, textwrap, json, hashlib
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

# Allow running from repo root
sys.path.append(os.path.abspath('backend'))

from hr_portal import create_app, get_db  # type: ignore
from hr_portal.models.access import Base
from hr_portal.seeds import ensure_sections, ensure_roles, ensure_initial_admin
from hr_portal.services.catalog import load_catalog_payload
from hr_portal.services.resolver import resolve_access, ordered_keys


def print_access_summary(payload):
    sections = payload['sections']
    rows = []
    for role in payload['roles']:
        keys = ordered_keys(resolve_access(role['key'], sections, server_overrides=payload['roleAccess']), sections)
        rows.append((role['key'], keys))
    if not rows:
        print('[INFO] No roles present.')
        return
    name_w = max(len(r[0]) for r in rows)
    print(f"{'Role'.ljust(name_w)} | Count | Sections")
    print('-' * (name_w + 40))
    for name, keys in rows:
        print(f"{name.ljust(name_w)} | {str(len(keys)).rjust(5)} | {', '.join(keys)}")


def parse_args():
    p = argparse.ArgumentParser(
        description='Seed HR portal sections & roles',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""Examples:\n  seed normally: seed_access.py\n  dry run: seed_access.py --dry-run\n  show access: seed_access.py --show-access\n""")
    )
    p.add_argument('--show-access', action='store_true', help='Print resolved sections per role after seeding')
    p.add_argument('--dry-run', action='store_true', help='Rollback after operations (no commit)')
    p.add_argument('--export-json', nargs='?', const='-', metavar='FILE', help='Export the sections payload as JSON (to FILE or stdout if omitted)')
    return p.parse_args()


def main():
    args = parse_args()
    app = create_app()
    with app.app_context():
        session = get_db()
        try:
            session.execute(text('SELECT 1 FROM app_sections LIMIT 1'))
        except SQLAlchemyError:
            # Auto-create schema for bootstrap; in real env prefer alembic upgrade
            session.rollback()
            Base.metadata.create_all(session.get_bind())
        finally:
            session.commit()

        try:
            created_s = ensure_sections(session)
            created_r = ensure_roles(session)
            ensure_initial_admin(session)
            payload = load_catalog_payload()
            if args.dry_run:
                session.rollback()
                print(f"[DRY-RUN] (rolled back) Sections would create: {created_s}, Roles would create: {created_r}")
            else:
                session.commit()
                print(f"[DONE] Sections created: {created_s}, Roles created: {created_r}")
            if args.show_access:
                print('\nResolved Section Access:')
                print_access_summary(payload)
            if args.export_json is not None:
                canonical = json.dumps(payload['roleAccess'], sort_keys=True, separators=(',', ':'))
                payload['meta'] = {'role_access_checksum_sha256': hashlib.sha256(canonical.encode('utf-8')).hexdigest()}
                if args.export_json == '-':
                    print(json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False))
                else:
                    with open(args.export_json, 'w', encoding='utf-8') as f:
                        json.dump(payload, f, indent=2, sort_keys=True, ensure_ascii=False)
                    print(f"[INFO] Exported JSON to {args.export_json}")
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()


if __name__ == '__main__':
    main()
