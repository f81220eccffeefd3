"""Dependency Injection Container."""

from injector import Injector, Module, provider, singleton

from ..generation import ComponentGenerator
from ..monitoring import RequestStats, metrics_collector
from ..operations import AlertingEngine, DashboardFeed, ServiceMonitor, SystemSampler, default_rules
from ..providers import GeminiProvider, MockProvider, OpenAIProvider, ProviderChain
from ..store import ShareStore, TemplateStore, UserStore
from .cache import LRUCache
from .config import Settings, get_settings
from .rate_limit import RateLimiter
from .tracing import Tracer, init_tracer

SERVICE_NAME = "vrux-service"


class CoreModule(Module):
    """Core dependencies."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    @singleton
    @provider
    def provide_settings(self) -> Settings:
        return self.settings

    @singleton
    @provider
    def provide_tracer(self) -> Tracer:
        return init_tracer(SERVICE_NAME)

    @singleton
    @provider
    def provide_request_cache(self) -> LRUCache:
        """Provider response cache, shared by the remote providers."""
        return LRUCache(max_size=self.settings.cache_size, ttl_seconds=self.settings.cache_ttl)

    @singleton
    @provider
    def provide_rate_limiter(self) -> RateLimiter:
        return RateLimiter(
            window_seconds=self.settings.rate_limit_window,
            max_requests=self.settings.rate_limit_requests,
        )

    @singleton
    @provider
    def provide_request_stats(self) -> RequestStats:
        return RequestStats()


class ProviderModule(Module):
    """AI providers and the generator on top of them."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    @singleton
    @provider
    def provide_chain(self, cache: LRUCache) -> ProviderChain:
        """Provide provider chain: OpenAI, then Gemini, then the mock fallback."""
        settings = self.settings
        shared_cache = cache if settings.enable_cache else None

        chain = ProviderChain()
        chain.register(
            OpenAIProvider(
                settings.openai_api_key,
                base_url=settings.openai_base_url,
                model=settings.openai_model,
                timeout=settings.provider_timeout,
                cache=shared_cache,
            ),
            priority=1,
        )
        chain.register(
            GeminiProvider(
                settings.gemini_api_key,
                model=settings.gemini_model,
                temperature=settings.temperature,
                max_tokens=settings.max_tokens,
                cache=shared_cache,
            ),
            priority=2,
        )
        chain.register(MockProvider(chunk_delay=settings.mock_chunk_delay), priority=99)
        return chain

    @singleton
    @provider
    def provide_generator(self, chain: ProviderChain) -> ComponentGenerator:
        return ComponentGenerator(chain, dev_delay=self.settings.dev_delay, expose_errors=self.settings.dev_mode)


class StoreModule(Module):
    """Domain stores."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    @singleton
    @provider
    def provide_template_store(self) -> TemplateStore:
        return TemplateStore()

    @singleton
    @provider
    def provide_share_store(self) -> ShareStore:
        return ShareStore(self.settings.share_data_path or None)

    @singleton
    @provider
    def provide_user_store(self) -> UserStore:
        return UserStore(session_ttl=self.settings.session_ttl, seed=self.settings.seed_users)


class OperationsModule(Module):
    """Telemetry: sampler, service monitor, alerting and the dashboard feed."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    @singleton
    @provider
    def provide_sampler(self, stats: RequestStats) -> SystemSampler:
        return SystemSampler(stats)

    @singleton
    @provider
    def provide_service_monitor(
        self, cache: LRUCache, users: UserStore, shares: ShareStore
    ) -> ServiceMonitor:
        return ServiceMonitor(
            {
                "Cache": lambda: cache.get("health-probe"),
                "Authentication": lambda: users.get_session("health-probe"),
                "Share Storage": lambda: shares.list_public(limit=1),
                "Monitoring": metrics_collector.get_metrics,
            }
        )

    @singleton
    @provider
    def provide_alerting_engine(
        self, stats: RequestStats, chain: ProviderChain, limiter: RateLimiter
    ) -> AlertingEngine:
        return AlertingEngine(
            rules=default_rules(self.settings.alert_webhook_url or None),
            request_stats=stats,
            chain=chain,
            rate_limiter=limiter,
        )

    @singleton
    @provider
    def provide_feed(
        self,
        sampler: SystemSampler,
        monitor: ServiceMonitor,
        chain: ProviderChain,
        engine: AlertingEngine,
        tracer: Tracer,
    ) -> DashboardFeed:
        async def services():
            return monitor.check(await chain.all_health())

        return DashboardFeed(
            sampler,
            services,
            engine,
            tracer=tracer,
            metrics_interval=self.settings.metrics_interval,
            services_interval=self.settings.services_interval,
        )


def create_container(settings: Settings | None = None) -> Injector:
    """Create configured injector."""
    settings = settings or get_settings()
    return Injector(
        [
            CoreModule(settings),
            ProviderModule(settings),
            StoreModule(settings),
            OperationsModule(settings),
        ]
    )
