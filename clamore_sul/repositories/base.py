# ==============================================================================
# REPOSITORIO BASE - Almacenamiento tabular en archivos JSON
# ==============================================================================
# Cada tabla vive en su propio archivo: <data_dir>/<tabla>.json -> [{...}, ...]
# Implementa TableStore para desarrollo local y tests. En producción se puede
# cambiar por RestTableStore sin tocar los servicios.
# ==============================================================================

import json
import os
import threading
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from clamore_sul.exceptions import StoreError
from clamore_sul.models import parse_timestamp, utc_now


Row = Dict[str, Any]


class JsonTableStore:
    """
    Backend local: una lista de filas por archivo JSON.

    Thread-safety mediante un lock global y escritura atómica
    (archivo temporal + os.replace).
    """

    # Lock global para evitar escrituras concurrentes a archivos
    _file_lock = threading.RLock()

    # Columnas de fecha que se completan al insertar si faltan
    TIMESTAMP_COLUMNS = {
        'products': 'created_at',
        'sales': 'sale_date',
        'site_visits': 'created_at',
    }

    def __init__(self, data_dir: str):
        """
        Args:
            data_dir: Carpeta donde se guardan los archivos de tablas
        """
        self.data_dir = data_dir
        os.makedirs(self.data_dir, exist_ok=True)

    def _path(self, table: str) -> str:
        return os.path.join(self.data_dir, f'{table}.json')

    def _read_raw(self, table: str) -> List[Row]:
        """
        Lee las filas de una tabla.

        Raises:
            StoreError: Si el archivo está corrupto o no se puede leer
        """
        path = self._path(table)
        with self._file_lock:
            if not os.path.exists(path):
                return []
            try:
                with open(path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            except json.JSONDecodeError as e:
                raise StoreError(f"Tabela '{table}' corrompida: {e}") from e
            except OSError as e:
                raise StoreError(f"Erro lendo tabela '{table}': {e}") from e
        if not isinstance(data, list):
            raise StoreError(f"Tabela '{table}' com formato inválido")
        return data

    def _write_raw(self, table: str, rows: List[Row]) -> None:
        path = self._path(table)
        with self._file_lock:
            # Escribir a archivo temporal primero para atomicidad
            temp_path = path + '.tmp'
            try:
                with open(temp_path, 'w', encoding='utf-8') as f:
                    json.dump(rows, f, indent=2, ensure_ascii=False)
                os.replace(temp_path, path)
            except OSError as e:
                if os.path.exists(temp_path):
                    os.remove(temp_path)
                raise StoreError(f"Erro gravando tabela '{table}': {e}") from e

    # =========================================================================
    # CONSULTAS
    # =========================================================================

    @staticmethod
    def _in_range(value: Any, bound: Any, is_lower: bool) -> bool:
        if isinstance(bound, datetime):
            current = parse_timestamp(value)
            bound = parse_timestamp(bound)
        else:
            current = value
        if current is None:
            return False
        return current >= bound if is_lower else current <= bound

    def select(
        self,
        table: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        gte: Optional[Dict[str, Any]] = None,
        lte: Optional[Dict[str, Any]] = None,
        token: Optional[str] = None,
    ) -> List[Row]:
        """
        Filtra filas por igualdad y por rango, y las ordena.

        Args:
            table: Nombre de la tabla
            filters: {columna: valor} (igualdad exacta, AND)
            order_by: Columna de orden (None = orden de inserción)
            descending: Orden descendente
            gte / lte: {columna: límite} inclusivos
            token: Ignorado en el backend local

        Returns:
            Lista de filas (copias)
        """
        rows = self._read_raw(table)
        result = []
        for row in rows:
            if filters and any(row.get(col) != val for col, val in filters.items()):
                continue
            if gte and not all(self._in_range(row.get(c), b, True) for c, b in gte.items()):
                continue
            if lte and not all(self._in_range(row.get(c), b, False) for c, b in lte.items()):
                continue
            result.append(dict(row))

        if order_by:
            present = [r for r in result if r.get(order_by) is not None]
            missing = [r for r in result if r.get(order_by) is None]
            present.sort(key=lambda r: r[order_by], reverse=descending)
            # NULLs al final, como en Postgres con ASC
            result = present + missing
        return result

    # =========================================================================
    # ESCRITURAS
    # =========================================================================

    def insert(self, table: str, row: Row, token: Optional[str] = None) -> Row:
        """Agrega una fila asignando id (uuid4) y fecha de creación si faltan."""
        record = dict(row)
        if not record.get('id'):
            record['id'] = str(uuid.uuid4())
        ts_column = self.TIMESTAMP_COLUMNS.get(table)
        if ts_column and not record.get(ts_column):
            record[ts_column] = utc_now().isoformat()
        with self._file_lock:
            rows = self._read_raw(table)
            rows.append(record)
            self._write_raw(table, rows)
        return dict(record)

    def update(self, table: str, row_id: str, changes: Row, token: Optional[str] = None) -> Row:
        """
        Actualiza campos de una fila.

        Raises:
            StoreError: Si no existe una fila con ese id
        """
        with self._file_lock:
            rows = self._read_raw(table)
            for record in rows:
                if str(record.get('id')) == str(row_id):
                    record.update({k: v for k, v in changes.items() if k != 'id'})
                    self._write_raw(table, rows)
                    return dict(record)
        raise StoreError(f"Registro '{row_id}' não encontrado em '{table}'", status=404)

    def delete(self, table: str, row_id: str, token: Optional[str] = None) -> None:
        """Elimina una fila (no-op si no existe, igual que un DELETE SQL)."""
        with self._file_lock:
            rows = self._read_raw(table)
            kept = [r for r in rows if str(r.get('id')) != str(row_id)]
            if len(kept) != len(rows):
                self._write_raw(table, kept)


class TableRepository:
    """
    Repositorio ligado a una tabla de un TableStore.

    Las subclases definen `table` y convierten filas a entidades.
    """

    table: str = ''

    def __init__(self, store):
        """
        Args:
            store: Cualquier implementación de TableStore
        """
        self.store = store
