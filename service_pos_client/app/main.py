"""
POS client service.

Hosts the session controller and the feature modules behind a local
HTTP surface that the UI renders from.
"""

from typing import Dict, Optional

import httpx
from fastapi import Query
from pydantic import BaseModel, Field

from shared.base_service import BaseService
from shared.circuit_breaker import CircuitBreaker
from shared.retry import RetryConfig

from .auth.client import AuthClient
from .licensing.client import LicenseServiceClient
from .licensing.models import ActivationResult
from .licensing.verifier import LICENSE_POLL_INTERVAL_SECONDS
from .modules.data_client import DataServiceClient
from .modules.inventory import InventoryModule, ProductInput, CategoryInput
from .modules.permissions import allowed_modules
from .modules.reporting import ReportingModule
from .modules.returns import ReturnsModule, ReturnInput
from .modules.sales import SalesModule, SaleInput
from .modules.settings import SettingsModule, StoreSettingsInput, UserInput
from .session.controller import SessionViewController
from .session.models import SessionSnapshot


class LoginRequest(BaseModel):
    username: str
    password: str


class WelcomeDismissRequest(BaseModel):
    do_not_show_again: bool = False


class ActivationRequest(BaseModel):
    code: str = Field("", description="Activation code as typed by the user")


class ActivationResponseBody(BaseModel):
    success: bool
    outcome: str
    message: str
    read_only: bool
    session: SessionSnapshot


class PosClientService(BaseService):
    """POS client service implementation."""

    def __init__(
        self,
        license_transport: Optional[httpx.AsyncBaseTransport] = None,
        data_transport: Optional[httpx.AsyncBaseTransport] = None,
        poll_interval_seconds: float = LICENSE_POLL_INTERVAL_SECONDS,
        **config_overrides
    ):
        super().__init__("pos_client", 8090, **config_overrides)

        self.license_client = LicenseServiceClient(
            self.config.license_service_url,
            timeout=self.config.request_timeout_seconds,
            retry_config=RetryConfig(
                max_attempts=self.config.license_retry_attempts,
                base_delay=self.config.license_retry_base_delay,
                max_delay=5.0
            ),
            circuit_breaker=CircuitBreaker(
                failure_threshold=self.config.circuit_breaker_failure_threshold,
                recovery_timeout=self.config.circuit_breaker_recovery_timeout,
                name="license_service"
            ),
            transport=license_transport
        )
        self.data_client = DataServiceClient(
            self.config.data_service_url,
            timeout=self.config.request_timeout_seconds,
            transport=data_transport
        )
        self.auth_client = AuthClient(
            self.config.data_service_url,
            timeout=self.config.request_timeout_seconds,
            transport=data_transport
        )

        self.controller = SessionViewController(
            self.license_client,
            self.auth_client,
            metrics=self.metrics,
            poll_interval_seconds=poll_interval_seconds
        )

        current_user = lambda: self.controller.user
        gate = self.controller.gate
        self.inventory = InventoryModule(self.data_client, gate, current_user)
        self.sales = SalesModule(self.data_client, gate, current_user)
        self.returns = ReturnsModule(self.data_client, gate, current_user)
        self.settings = SettingsModule(self.data_client, gate, current_user)
        self.reporting = ReportingModule(self.data_client, gate, current_user)

        @self.app.on_event("startup")
        async def _startup():
            await self.start()

        @self.app.on_event("shutdown")
        async def _shutdown():
            await self.stop()

        self._setup_session_routes()
        self._setup_license_routes()
        self._setup_module_routes()

        self.app.state.pos_client_service = self

    def _setup_session_routes(self):
        """Set up session view routes."""

        @self.app.get("/")
        async def root():
            return {
                "service": "pos_client",
                "message": "POS client - session and entitlement controller",
                "version": "1.0.0",
                "capabilities": ["session", "licensing", "sales", "inventory", "reporting", "returns", "settings"]
            }

        @self.app.get("/session", response_model=SessionSnapshot)
        async def get_session():
            return self.controller.snapshot()

        @self.app.post("/session/splash/continue", response_model=SessionSnapshot)
        async def continue_from_splash():
            return self.controller.continue_from_splash()

        @self.app.post("/session/login", response_model=SessionSnapshot)
        async def login(request: LoginRequest):
            return await self.controller.login(request.username, request.password)

        @self.app.post("/session/logout", response_model=SessionSnapshot)
        async def logout():
            return await self.controller.logout()

        @self.app.post("/session/welcome/dismiss", response_model=SessionSnapshot)
        async def dismiss_welcome(request: WelcomeDismissRequest):
            return await self.controller.dismiss_welcome_modal(request.do_not_show_again)

        @self.app.get("/session/modules")
        async def session_modules():
            user = self.controller.user
            return {"modules": sorted(m.value for m in allowed_modules(user.role_id if user else None))}

    def _setup_license_routes(self):
        """Set up license routes."""

        @self.app.get("/license")
        async def get_license():
            state = self.controller.store.current()
            banner = self.controller.gate.banner()
            return {
                "license": state.model_dump(mode="json") if state else None,
                "can_write": self.controller.gate.can_write(),
                "banner": banner.model_dump(mode="json") if banner else None
            }

        @self.app.post("/license/refresh")
        async def refresh_license():
            state = await self.controller.store.refresh()
            return {"license": state.model_dump(mode="json")}

        @self.app.post("/license/activation/open", response_model=SessionSnapshot)
        async def open_activation():
            return await self.controller.open_activation()

        @self.app.post("/license/activation/close", response_model=SessionSnapshot)
        async def close_activation():
            return self.controller.close_activation()

        @self.app.post("/license/activate", response_model=ActivationResponseBody)
        async def activate(request: ActivationRequest):
            result: ActivationResult = await self.controller.submit_activation(request.code)
            return ActivationResponseBody(
                success=result.success,
                outcome=result.outcome.value,
                message=result.message,
                read_only=result.read_only,
                session=self.controller.snapshot()
            )

    def _setup_module_routes(self):
        """Set up feature module routes."""

        @self.app.get("/inventory/products")
        async def list_products(search: Optional[str] = Query(None), category_id: Optional[int] = Query(None)):
            return await self.inventory.list_products(search=search, category_id=category_id)

        @self.app.get("/inventory/products/low-stock")
        async def low_stock_products():
            return await self.inventory.low_stock_products()

        @self.app.post("/inventory/products", status_code=201)
        async def create_product(product: ProductInput):
            return await self.inventory.create_product(product)

        @self.app.put("/inventory/products/{product_id}")
        async def update_product(product_id: int, product: ProductInput):
            return await self.inventory.update_product(product_id, product)

        @self.app.get("/inventory/categories")
        async def list_categories():
            return await self.inventory.list_categories()

        @self.app.post("/inventory/categories", status_code=201)
        async def create_category(category: CategoryInput):
            return await self.inventory.create_category(category)

        @self.app.put("/inventory/categories/{category_id}")
        async def update_category(category_id: int, category: CategoryInput):
            return await self.inventory.update_category(category_id, category)

        @self.app.get("/sales")
        async def list_sales(date_from: Optional[str] = Query(None), date_to: Optional[str] = Query(None)):
            return await self.sales.list_sales(date_from=date_from, date_to=date_to)

        @self.app.get("/sales/products/{code}")
        async def find_product_by_code(code: str):
            return await self.sales.find_product_by_code(code)

        @self.app.post("/sales", status_code=201)
        async def create_sale(sale: SaleInput):
            return await self.sales.create_sale(sale)

        @self.app.get("/returns")
        async def list_returns():
            return await self.returns.list_returns()

        @self.app.get("/returns/sales/{folio}")
        async def find_sale_for_return(folio: str):
            return await self.returns.find_sale(folio)

        @self.app.post("/returns", status_code=201)
        async def create_return(return_input: ReturnInput):
            return await self.returns.create_return(return_input)

        @self.app.get("/settings/users")
        async def list_users():
            return await self.settings.list_users()

        @self.app.post("/settings/users", status_code=201)
        async def create_user(user_input: UserInput):
            return await self.settings.create_user(user_input)

        @self.app.put("/settings/users/{user_id}")
        async def update_user(user_id: int, user_input: UserInput):
            return await self.settings.update_user(user_id, user_input)

        @self.app.get("/settings/store")
        async def get_store_settings():
            return await self.settings.get_store_settings()

        @self.app.put("/settings/store")
        async def update_store_settings(store: StoreSettingsInput):
            return await self.settings.update_store_settings(store)

        @self.app.get("/reports/sales-today")
        async def sales_today():
            return await self.reporting.sales_today()

        @self.app.get("/reports/stats-with-returns")
        async def stats_with_returns(date_from: str = Query(...), date_to: str = Query(...)):
            return await self.reporting.stats_with_returns(date_from, date_to)

        @self.app.get("/reports/sales-summary")
        async def sales_summary(date_from: Optional[str] = Query(None), date_to: Optional[str] = Query(None)):
            return await self.reporting.sales_summary(date_from=date_from, date_to=date_to)

        @self.app.get("/reports/top-products")
        async def top_products(limit: int = Query(10, ge=1, le=100)):
            return await self.reporting.top_products(limit=limit)

    async def _check_dependencies(self) -> Dict[str, str]:
        """Check backend reachability."""
        dependencies = {}
        dependencies["license_service"] = "ok" if await self.license_client.health_check() else "error"
        dependencies["data_service"] = "ok" if await self.data_client.health_check() else "error"
        return dependencies

    async def start(self):
        """Start the session controller."""
        await self.controller.start()
        self.logger.info("POS client started", view=self.controller.view.value)

    async def stop(self):
        """Stop background work and release HTTP pools."""
        await self.controller.shutdown()
        await self.license_client.close()
        await self.data_client.close()
        await self.auth_client.close()
        self.logger.info("POS client stopped")


def create_app(**kwargs):
    """Create POS client application."""
    service = PosClientService(**kwargs)
    return service.app


if __name__ == "__main__":
    service = PosClientService()
    service.run()
