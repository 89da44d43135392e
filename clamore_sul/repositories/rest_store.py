# ==============================================================================
# BACKEND HOSPEDADO - Tablas y autenticación por HTTP
# ==============================================================================
# Habla el dialecto PostgREST/GoTrue de la plataforma hospedada:
#   GET/POST/PATCH/DELETE {url}/rest/v1/<tabla>?col=eq.valor&order=col.asc
#   POST {url}/auth/v1/token?grant_type=password
#   POST {url}/auth/v1/logout
#
# La clave pública (apikey) no es secreta: los permisos reales se aplican
# en el servidor con el token del usuario (Row Level Security).
# ==============================================================================

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import requests

from clamore_sul.exceptions import InvalidCredentialsError, StoreError
from clamore_sul.models import AuthSession


logger = logging.getLogger(__name__)

Row = Dict[str, Any]


def _error_message(response) -> str:
    """Extrae el mensaje crudo de error que devuelve la plataforma."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ('message', 'msg', 'error_description', 'error'):
            if body.get(key):
                return str(body[key])
    text = getattr(response, 'text', '') or ''
    return text.strip() or f"HTTP {response.status_code}"


def _json_body(response, source: str):
    """Cuerpo JSON de una respuesta exitosa; vacío o inválido -> StoreError."""
    try:
        return response.json()
    except ValueError as e:
        raise StoreError(f"Resposta inválida de '{source}'", status=response.status_code) from e


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


class _HostedClient:
    """Base común: sesión HTTP, cabeceras y manejo de errores."""

    def __init__(self, base_url: str, api_key: str, timeout: float = 10.0, http=None):
        """
        Args:
            base_url: Endpoint del proyecto (sin barra final)
            api_key: Clave pública del proyecto
            timeout: Timeout por request en segundos
            http: Sesión HTTP (requests.Session); inyectable para tests
        """
        if not base_url or not api_key:
            raise ValueError("base_url y api_key son obligatorios para el backend hospedado")
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key
        self.timeout = timeout
        self.http = http or requests.Session()

    def _headers(self, token: Optional[str] = None, prefer: Optional[str] = None) -> Dict[str, str]:
        headers = {
            'apikey': self.api_key,
            'Authorization': f'Bearer {token or self.api_key}',
            'Content-Type': 'application/json',
        }
        if prefer:
            headers['Prefer'] = prefer
        return headers

    def _send(self, method: str, url: str, **kwargs):
        try:
            return self.http.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise StoreError(f"Falha de comunicação com o servidor: {e}") from e


class RestTableStore(_HostedClient):
    """TableStore sobre la API REST de la plataforma hospedada."""

    def _url(self, table: str) -> str:
        return f'{self.base_url}/rest/v1/{table}'

    def _request(self, method: str, table: str, params=None, json=None,
                 token: Optional[str] = None, prefer: Optional[str] = None):
        response = self._send(
            method,
            self._url(table),
            params=params,
            json=json,
            headers=self._headers(token, prefer),
        )
        if response.status_code >= 400:
            raise StoreError(_error_message(response), status=response.status_code)
        return response

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
        # Lista de tuplas: la misma columna puede aparecer con gte y lte
        params = [('select', '*')]
        for column, value in (filters or {}).items():
            if value is None:
                params.append((column, 'is.null'))
            else:
                params.append((column, f'eq.{_format_value(value)}'))
        for column, bound in (gte or {}).items():
            params.append((column, f'gte.{_format_value(bound)}'))
        for column, bound in (lte or {}).items():
            params.append((column, f'lte.{_format_value(bound)}'))
        if order_by:
            params.append(('order', f"{order_by}.{'desc' if descending else 'asc'}"))

        response = self._request('GET', table, params=params, token=token)
        data = _json_body(response, table)
        return data if isinstance(data, list) else []

    def insert(self, table: str, row: Row, token: Optional[str] = None) -> Row:
        response = self._request('POST', table, json=row, token=token,
                                 prefer='return=representation')
        data = _json_body(response, table)
        if isinstance(data, list):
            if not data:
                raise StoreError(f"Inserção em '{table}' não retornou registro")
            return data[0]
        return data

    def update(self, table: str, row_id: str, changes: Row, token: Optional[str] = None) -> Row:
        response = self._request('PATCH', table, params=[('id', f'eq.{row_id}')],
                                 json=changes, token=token, prefer='return=representation')
        data = _json_body(response, table)
        if not data:
            raise StoreError(f"Registro '{row_id}' não encontrado em '{table}'", status=404)
        return data[0] if isinstance(data, list) else data

    def delete(self, table: str, row_id: str, token: Optional[str] = None) -> None:
        self._request('DELETE', table, params=[('id', f'eq.{row_id}')], token=token)


class RestAuthBackend(_HostedClient):
    """AuthBackend sobre el servicio de autenticación de la plataforma."""

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        """
        Login por email/contraseña.

        Raises:
            InvalidCredentialsError: 400/401 del servidor (sin más detalle)
            StoreError: Red caída u otro error del servidor
        """
        response = self._send(
            'POST',
            f'{self.base_url}/auth/v1/token',
            params={'grant_type': 'password'},
            json={'email': email, 'password': password},
            headers=self._headers(),
        )
        if response.status_code in (400, 401, 422):
            raise InvalidCredentialsError()
        if response.status_code >= 400:
            raise StoreError(_error_message(response), status=response.status_code)

        data = _json_body(response, 'auth')
        if not isinstance(data, dict):
            raise StoreError("Resposta inválida de 'auth'", status=response.status_code)
        user = data.get('user') or {}
        expires_in = int(data.get('expires_in') or 3600)
        return AuthSession.starting_now(
            user_id=str(user.get('id', '')),
            email=user.get('email') or email,
            lifetime_seconds=expires_in,
            access_token=data.get('access_token'),
        )

    def sign_out(self, session: AuthSession) -> None:
        if not session.access_token:
            return
        response = self._send(
            'POST',
            f'{self.base_url}/auth/v1/logout',
            headers=self._headers(session.access_token),
        )
        # 401 = el token ya no era válido; la sesión está terminada igual
        if response.status_code >= 400 and response.status_code != 401:
            raise StoreError(_error_message(response), status=response.status_code)
