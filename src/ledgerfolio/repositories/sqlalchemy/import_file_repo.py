"""SQLAlchemy implementation of ImportFileRepository."""

from typing import Optional

from sqlalchemy.orm import Session

from ledgerfolio.core.exceptions import NotFoundError
from ledgerfolio.domain.models import ImportFile
from ledgerfolio.repositories.sqlalchemy.orm_models import ImportFileORM


class SqlAlchemyImportFileRepository:
    """SQLAlchemy-backed repository for ingestion batch records."""

    def __init__(self, db: Session):
        self._db = db

    def create(self, import_file: ImportFile) -> ImportFile:
        orm_file = ImportFileORM(
            import_id=import_file.import_id,
            filename=import_file.filename,
            file_hash=import_file.file_hash,
            source=import_file.source,
            row_count=import_file.row_count,
            imported_at_est=import_file.imported_at_est,
        )
        self._db.add(orm_file)
        self._db.flush()
        return self._to_domain(orm_file)

    def finalize(self, import_file: ImportFile) -> ImportFile:
        orm_file = self._db.get(ImportFileORM, import_file.import_id)
        if orm_file is None:
            raise NotFoundError("ImportFile", import_file.import_id)
        orm_file.row_count = import_file.row_count
        orm_file.inserted_rows = import_file.inserted_rows
        orm_file.skipped_rows = import_file.skipped_rows
        orm_file.failed_rows = import_file.failed_rows
        self._db.flush()
        return self._to_domain(orm_file)

    def get_by_hash(self, file_hash: str) -> Optional[ImportFile]:
        orm_file = (
            self._db.query(ImportFileORM)
            .filter(ImportFileORM.file_hash == file_hash)
            .order_by(ImportFileORM.imported_at_est.desc())
            .first()
        )
        return self._to_domain(orm_file) if orm_file else None

    def list_recent(self, limit: int = 50) -> list[ImportFile]:
        orm_files = (
            self._db.query(ImportFileORM)
            .order_by(ImportFileORM.imported_at_est.desc())
            .limit(limit)
            .all()
        )
        return [self._to_domain(f) for f in orm_files]

    @staticmethod
    def _to_domain(orm: ImportFileORM) -> ImportFile:
        return ImportFile(
            import_id=orm.import_id,
            filename=orm.filename,
            file_hash=orm.file_hash,
            source=orm.source,
            row_count=orm.row_count or 0,
            inserted_rows=orm.inserted_rows or 0,
            skipped_rows=orm.skipped_rows or 0,
            failed_rows=orm.failed_rows or 0,
            imported_at_est=orm.imported_at_est,
        )
