# ==============================================================================
# CONTENEDOR DE DEPENDENCIAS - Inyección de servicios
# ==============================================================================
# Este módulo proporciona una forma centralizada de obtener instancias
# de repositorios y servicios. Facilita:
#   - Inyección de dependencias
#   - Testing (se puede inyectar un TableStore falso)
#   - Cambio de backend (JSON local <-> plataforma hospedada) sin tocar servicios
#
# ═══════════════════════════════════════════════════════════════════════════════
# SELECCIÓN DE BACKEND
# ═══════════════════════════════════════════════════════════════════════════════
#
#   CLAMORE_STORE_URL definido -> RestTableStore + RestAuthBackend
#   sin CLAMORE_STORE_URL      -> JsonTableStore + LocalAuthBackend (data_dir)
#
# Los servicios dependen de los protocolos de repositories/interfaces.py,
# no de la implementación elegida.
# ==============================================================================

from typing import Optional

from clamore_sul.config import Config

# ═══════════════════════════════════════════════════════════════════════════════
# REPOSITORIOS - Capa de persistencia
# ═══════════════════════════════════════════════════════════════════════════════
from clamore_sul.repositories import (
    CategoryRepository,
    FallbackRepository,
    JsonTableStore,
    LocalAuthBackend,
    PrimaryStore,
    ProductRepository,
    RestAuthBackend,
    RestTableStore,
    RoleRepository,
    SaleRepository,
    UserRepository,
    VisitRepository,
)

# ═══════════════════════════════════════════════════════════════════════════════
# SERVICIOS - Capa de lógica de negocio
# ═══════════════════════════════════════════════════════════════════════════════
from clamore_sul.services import (
    AuthService,
    CatalogService,
    DashboardLoader,
    DashboardService,
    ProductService,
    SaleService,
    VisitService,
)


class AppContainer:
    """
    Contenedor de dependencias de la aplicación.

    Implementa el patrón Singleton para asegurar una única instancia
    de cada repositorio y servicio.

    Uso:
        container = AppContainer(config)
        catalog_service = container.catalog_service
        dashboard_loader = container.dashboard_loader
    """

    _instance: Optional['AppContainer'] = None

    def __new__(cls, config: Config = None, store=None, auth_backend=None):
        """Singleton pattern."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config: Config = None, store=None, auth_backend=None):
        """
        Inicializa el contenedor.

        Args:
            config: Configuración (por defecto Config.from_env())
            store: TableStore ya construido (tests); si no, según config
            auth_backend: AuthBackend ya construido (tests); si no, según config
        """
        if self._initialized:
            return

        self.config = config or Config.from_env()
        self._store = store
        self._auth_backend = auth_backend
        self._reset_instances()
        self._initialized = True

    def _reset_instances(self) -> None:
        # Repositorios (lazy loading)
        self._category_repo: Optional[CategoryRepository] = None
        self._product_repo: Optional[ProductRepository] = None
        self._sale_repo: Optional[SaleRepository] = None
        self._visit_repo: Optional[VisitRepository] = None
        self._role_repo: Optional[RoleRepository] = None
        self._user_repo: Optional[UserRepository] = None
        self._catalog_repo: Optional[FallbackRepository] = None

        # Servicios (lazy loading)
        self._auth_service: Optional[AuthService] = None
        self._visit_service: Optional[VisitService] = None
        self._catalog_service: Optional[CatalogService] = None
        self._dashboard_service: Optional[DashboardService] = None
        self._dashboard_loader: Optional[DashboardLoader] = None
        self._product_service: Optional[ProductService] = None
        self._sale_service: Optional[SaleService] = None

    # =========================================================================
    # BACKEND
    # =========================================================================

    @property
    def store(self):
        """TableStore activo (singleton)."""
        if self._store is None:
            if self.config.uses_hosted_store:
                self._store = RestTableStore(
                    self.config.store_url, self.config.store_key, self.config.store_timeout
                )
            else:
                self._store = JsonTableStore(self.config.data_dir)
        return self._store

    @property
    def auth_backend(self):
        """AuthBackend activo (singleton)."""
        if self._auth_backend is None:
            if self.config.uses_hosted_store:
                self._auth_backend = RestAuthBackend(
                    self.config.store_url, self.config.store_key, self.config.store_timeout
                )
            else:
                self._auth_backend = LocalAuthBackend(self.user_repo)
        return self._auth_backend

    # =========================================================================
    # REPOSITORIOS
    # =========================================================================

    @property
    def category_repo(self) -> CategoryRepository:
        if self._category_repo is None:
            self._category_repo = CategoryRepository(self.store)
        return self._category_repo

    @property
    def product_repo(self) -> ProductRepository:
        if self._product_repo is None:
            self._product_repo = ProductRepository(self.store)
        return self._product_repo

    @property
    def sale_repo(self) -> SaleRepository:
        if self._sale_repo is None:
            self._sale_repo = SaleRepository(self.store)
        return self._sale_repo

    @property
    def visit_repo(self) -> VisitRepository:
        if self._visit_repo is None:
            self._visit_repo = VisitRepository(self.store)
        return self._visit_repo

    @property
    def role_repo(self) -> RoleRepository:
        if self._role_repo is None:
            self._role_repo = RoleRepository(self.store)
        return self._role_repo

    @property
    def user_repo(self) -> UserRepository:
        """Repositorio de usuarios (solo backend local)."""
        if self._user_repo is None:
            self._user_repo = UserRepository(self.store)
        return self._user_repo

    @property
    def catalog_repo(self) -> FallbackRepository:
        """Vitrina de dos niveles: tablas reales con respaldo de demostración."""
        if self._catalog_repo is None:
            self._catalog_repo = FallbackRepository(
                PrimaryStore(self.category_repo, self.product_repo)
            )
        return self._catalog_repo

    # =========================================================================
    # SERVICIOS
    # =========================================================================

    @property
    def auth_service(self) -> AuthService:
        if self._auth_service is None:
            self._auth_service = AuthService(self.auth_backend, self.role_repo)
        return self._auth_service

    @property
    def visit_service(self) -> VisitService:
        if self._visit_service is None:
            self._visit_service = VisitService(self.visit_repo)
        return self._visit_service

    @property
    def catalog_service(self) -> CatalogService:
        if self._catalog_service is None:
            self._catalog_service = CatalogService(self.catalog_repo, self.config.whatsapp_number)
        return self._catalog_service

    @property
    def dashboard_service(self) -> DashboardService:
        if self._dashboard_service is None:
            self._dashboard_service = DashboardService(
                self.visit_repo,
                self.sale_repo,
                self.product_repo,
                self.category_repo,
            )
        return self._dashboard_service

    @property
    def dashboard_loader(self) -> DashboardLoader:
        if self._dashboard_loader is None:
            self._dashboard_loader = DashboardLoader(self.dashboard_service)
        return self._dashboard_loader

    @property
    def product_service(self) -> ProductService:
        if self._product_service is None:
            self._product_service = ProductService(self.product_repo)
        return self._product_service

    @property
    def sale_service(self) -> SaleService:
        if self._sale_service is None:
            self._sale_service = SaleService(self.sale_repo)
        return self._sale_service

    # =========================================================================
    # UTILIDADES
    # =========================================================================

    @classmethod
    def reset_instance(cls) -> None:
        """Descarta el singleton y todo lo que construyó (tests, create_app)."""
        if cls._instance is not None:
            cls._instance._store = None
            cls._instance._auth_backend = None
            cls._instance._reset_instances()
            cls._instance = None
