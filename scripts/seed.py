#!/usr/bin/env python3
"""
Seed a local archive with fake documents and users for load testing.

Documents get random unit-length embeddings (or none with ``--dim 0``), so
search can be exercised at scale without calling the embedding provider.
The first seeded user is an admin; the rest are editors sharing one password.

Usage:
    python scripts/seed.py --documents 50000 --users 500 --dim 128
"""

from __future__ import annotations

from typing import Annotated

import numpy as np
import typer
from faker import Faker

from timearchive.auth import hash_password
from timearchive.config import load_config
from timearchive.errors import ConflictError
from timearchive.storage import DocumentRecord, DuckDBStorage, StorageBackend, UserRecord, utcnow

SEED_PASSWORD = "Password123!"
BATCH = 1000


def seed_documents(
    storage: StorageBackend, total: int, *, dim: int, fake: Faker, rng: np.random.Generator
) -> int:
    for i in range(total):
        embedding: tuple[float, ...] = ()
        if dim > 0:
            vector = rng.normal(size=dim)
            embedding = tuple((vector / np.linalg.norm(vector)).tolist())
        storage.insert_document(
            DocumentRecord(
                id=DuckDBStorage.make_document_id(),
                title=fake.sentence(nb_words=4).rstrip("."),
                date=fake.date_between(start_date="-10y").isoformat(),
                text="\n\n".join(fake.paragraphs(nb=fake.random_int(1, 4))),
                embedding=embedding,
                created_at=utcnow(),
            )
        )
        if (i + 1) % BATCH == 0 or i + 1 == total:
            print(f"Inserted {i + 1}/{total} documents")
    return total


def seed_users(storage: StorageBackend, total: int, *, fake: Faker) -> list[UserRecord]:
    password_hash = hash_password(SEED_PASSWORD)
    created: list[UserRecord] = []
    for i in range(total):
        user = UserRecord(
            id=DuckDBStorage.make_user_id(),
            email=fake.unique.email().lower(),
            password_hash=password_hash,
            role="admin" if i == 0 else "editor",
            created_at=utcnow(),
        )
        try:
            storage.create_user(user)
        except ConflictError:
            continue
        created.append(user)
    print(f"Created {len(created)} users (password: {SEED_PASSWORD})")
    return created


def main(
    documents: Annotated[int, typer.Option(help="Documents to insert.")] = 50_000,
    users: Annotated[int, typer.Option(help="Users to create.")] = 0,
    dim: Annotated[int, typer.Option(help="Embedding size; 0 leaves documents unembedded.")] = 128,
    db_path: Annotated[str | None, typer.Option(help="DuckDB file.")] = None,
    seed: Annotated[int | None, typer.Option(help="Random seed.")] = None,
) -> None:
    fake = Faker()
    if seed is not None:
        Faker.seed(seed)
    rng = np.random.default_rng(seed)

    storage = DuckDBStorage(load_config(db_path=db_path).db_path)
    try:
        seed_documents(storage, documents, dim=dim, fake=fake, rng=rng)
        seed_users(storage, users, fake=fake)
    finally:
        storage.close()


if __name__ == "__main__":
    typer.run(main)
