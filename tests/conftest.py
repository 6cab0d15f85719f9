import sqlite3
from dataclasses import dataclass, field
from pathlib import Path

import pytest

ZASSET_SCHEMA = """
    CREATE TABLE ZASSET (
        Z_PK INTEGER PRIMARY KEY,
        ZFILENAME VARCHAR,
        ZDIRECTORY VARCHAR,
        ZUUID VARCHAR,
        ZADDEDDATE TIMESTAMP,
        ZDATECREATED TIMESTAMP,
        ZMODIFICATIONDATE TIMESTAMP,
        ZWIDTH INTEGER,
        ZHEIGHT INTEGER,
        ZKIND INTEGER,
        ZTRASHEDSTATE INTEGER
    )
"""


@dataclass
class FakeLibrary:
    """
    A minimal Photos library bundle on disk: database/photos.db with a ZASSET table, plus an originals/ folder
    """

    root: Path
    db_file_name: str = "photos.db"
    next_pk: int = field(default=1, init=False)

    def __post_init__(self):
        self.root.joinpath("database").mkdir(parents=True, exist_ok=True)
        self.root.joinpath("originals").mkdir(parents=True, exist_ok=True)

        self.execute(ZASSET_SCHEMA)

    def execute(self, sql: str, parameters: tuple = ()):
        db = sqlite3.connect(self.db_path)
        try:
            with db:
                db.execute(sql, parameters)
        finally:
            db.close()

    @property
    def db_path(self) -> Path:
        return self.root.joinpath("database", self.db_file_name)

    def add_asset(
        self,
        filename: str | None = "IMG_0001.HEIC",
        directory: str | None = None,
        uuid: str | None = None,
        date_created: float | None = 0.0,
        added_date: float | None = None,
        modification_date: float | None = None,
        width: int | None = 4032,
        height: int | None = 3024,
        kind: int = 0,
        trashed_state: int = 0,
        create_file: bool = True,
    ) -> int:
        pk = self.next_pk
        self.next_pk += 1

        self.execute(
            "INSERT INTO ZASSET VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (pk, filename, directory, uuid, added_date, date_created, modification_date, width, height, kind, trashed_state),
        )

        if create_file and filename:
            if directory:
                self.add_original(directory, filename)
            elif uuid:
                self.add_original(uuid.split("-")[0], filename)

        return pk

    def add_original(self, bucket: str, filename: str, content: bytes = b"fake image data") -> Path:
        file_path = self.root.joinpath("originals", bucket, filename)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_bytes(content)
        return file_path


@pytest.fixture
def fake_library(tmp_path) -> FakeLibrary:
    return FakeLibrary(root=tmp_path.joinpath("Pictures", "Photos Library.photoslibrary"))


@pytest.fixture
def make_library(tmp_path):
    def factory(name: str = "Photos.photoslibrary", db_file_name: str = "photos.db") -> FakeLibrary:
        return FakeLibrary(root=tmp_path.joinpath(name), db_file_name=db_file_name)

    return factory
