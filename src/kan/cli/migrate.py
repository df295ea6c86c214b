"""Handler for 'kan migrate'."""

from kan import migrate as migration
from kan.cli._common import open_project, output_json


def migrate(args) -> int:
    """Rewrite outdated files of the current project at the current schema."""
    ctx = open_project(args.root)
    plan = migration.plan(ctx.paths, ctx.global_store.path)

    if not plan.has_changes():
        if args.json:
            output_json({"migrated": [], "dry_run": args.dry_run})
        else:
            print("Everything is up to date. No migration needed.")
        return 0

    done = migration.execute(plan, dry_run=args.dry_run)

    if args.json:
        data = plan.to_dict()
        output_json({"migrated": data["files"], "dry_run": args.dry_run})
    elif args.dry_run:
        print("Migration plan (dry run):")
        for item in done:
            print(f"  Would migrate {item.describe()}")
    else:
        for item in done:
            print(f"Migrated {item.describe()}")
        print()
        print("Migration complete.")
        print("Tip: Commit this migration separately. Use 'git blame --ignore-rev' to hide bulk changes.")
    return 0
