"""
Blog example with soft-delete scoping.

Run from examples/blog-sqlalchemy:
    python -m app.main
"""

from datetime import datetime, timezone

from app.database import init_db
from app.softscope_setup import db


def seed() -> None:
    """Create two authors, soft-delete one, and soft-delete one post."""
    users = db.model("User")
    posts = db.model("Post")

    alice = users.create({"email": "alice@example.com", "name": "Alice"})
    bob = users.create({"email": "bob@example.com", "name": "Bob"})

    first = posts.create({"author_id": alice["id"], "title": "Hello"})
    posts.create({"author_id": alice["id"], "title": "Draft I regret"})
    posts.create({"author_id": bob["id"], "title": "Bob's only post"})
    db.model("Comment").create({"post_id": first["id"], "body": "Nice post"})

    now = datetime.now(timezone.utc)
    users.update({"id": bob["id"]}, {"deleted_at": now})
    posts.update_many({"deleted_at": now}, where={"title": "Draft I regret"})


def main() -> None:
    init_db()
    seed()

    print("Visible authors and their posts:")
    for user in db.model("User").find_many(
        order_by={"id": "asc"},
        include={"posts": {"include": {"comments": True}}},
    ):
        titles = ", ".join(post["title"] for post in user["posts"]) or "-"
        print(f"  {user['name']}: {titles}")

    print("All authors, including deleted:")
    for user in db.with_deleted().model("User").find_many(order_by={"id": "asc"}):
        status = "deleted" if user["deleted_at"] else "active"
        print(f"  {user['name']} ({status})")

    bob = db.model("User").find_unique(where={"email": "bob@example.com"})
    print(f"Lookup by key still finds {bob['name']}")


if __name__ == "__main__":
    main()
