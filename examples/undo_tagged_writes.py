"""
plyra-restore — Tagged Writes Example
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

One database, a few tagged writes, and restoring them by tag.
"""

import os
import tempfile

from plyra_restore import RestorableDatabase


def show(db: RestorableDatabase, label: str) -> None:
    rows = db.store.query("items", ["id", "title", "qty"])
    print(f"   {label}: {rows}")


def main() -> None:
    path = os.path.join(tempfile.mkdtemp(prefix="plyra_restore_"), "example.db")
    db = RestorableDatabase.open(path)

    db.execute(
        "CREATE TABLE items (id INTEGER PRIMARY KEY, title TEXT NOT NULL, qty INTEGER)",
        tag="setup",
    )
    for title, qty in [("apple", 3), ("pear", 1), ("plum", 7)]:
        db.insert("items", {"title": title, "qty": qty}, tag="seed")

    print("=" * 60)
    print("plyra-restore — Tagged Writes Example")
    print("=" * 60)
    show(db, "initial")

    # 1. Update several rows, then undo
    print("\n1. Zeroing stock above 2 (tag: restock)...")
    db.update("items", {"qty": 0}, "qty > ?", [2], tag="restock")
    show(db, "after update")
    print(f"   restored {db.restore('restock')} row(s)")
    show(db, "after restore")

    # 2. Delete, then undo
    print("\n2. Deleting pears (tag: cleanup)...")
    db.delete("items", "title = ?", ["pear"], tag="cleanup")
    show(db, "after delete")
    db.restore("cleanup")
    show(db, "after restore")

    # 3. Upsert over an existing row, then undo
    print("\n3. Replacing row 1 (tag: rename)...")
    db.replace("items", {"id": 1, "title": "quince", "qty": 2}, tag="rename")
    show(db, "after replace")
    db.restore("rename")
    show(db, "after restore")

    # 4. Re-using a tag keeps only the latest inverse
    print("\n4. Two raw updates under one tag (tag: twice)...")
    db.execute("UPDATE items SET title = ? WHERE id = ?", ["first", 2], tag="twice")
    db.execute("UPDATE items SET title = ? WHERE id = ?", ["second", 3], tag="twice")
    db.restore("twice")
    show(db, "after restore (only row 3 reverted)")

    print(f"\n   tags still recorded: {sorted(db.recorded_tags())}")
    db.close()


if __name__ == "__main__":
    main()
