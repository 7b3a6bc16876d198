"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import create_client

from calorie_planner.adapters.mercadopago_client import HttpxMercadoPagoClient
from calorie_planner.adapters.openai_structured_client import OpenAIStructuredClient
from calorie_planner.adapters.supabase_client_repository import (
    SupabaseClientRepository,
)
from calorie_planner.adapters.supabase_identity_provider import (
    SupabaseIdentityProvider,
)
from calorie_planner.adapters.supabase_library_repository import (
    SupabaseLibraryRepository,
)
from calorie_planner.adapters.supabase_plan_repository import SupabasePlanRepository
from calorie_planner.adapters.supabase_profile_repository import (
    SupabaseProfileRepository,
)
from calorie_planner.adapters.supabase_tracking_repository import (
    SupabaseChatRepository,
    SupabaseWeightRepository,
)
from calorie_planner.config import Settings
from calorie_planner.services.auth import IdentityProvider
from calorie_planner.services.autosave import DebouncedScheduler, PlanAutosaver
from calorie_planner.services.chat import ChatService
from calorie_planner.services.clients import ClientService
from calorie_planner.services.library import LibraryService
from calorie_planner.services.meal_plans import MealPlanService
from calorie_planner.services.notifications import Notifier
from calorie_planner.services.payments import SubscriptionService
from calorie_planner.services.plans import PlanRepository, WeeklyPlanService
from calorie_planner.services.profiles import ProfileService
from calorie_planner.services.recommendations import RecommendationService
from calorie_planner.services.session import PlanSession
from calorie_planner.services.weight import WeightService


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    identity_provider: IdentityProvider
    plan_repository: PlanRepository
    weekly_plan_service: WeeklyPlanService
    library_service: LibraryService
    profile_service: ProfileService
    recommendation_service: RecommendationService
    meal_plan_service: MealPlanService
    weight_service: WeightService
    client_service: ClientService
    chat_service: ChatService
    subscription_service: SubscriptionService
    close_resources: Callable[[], Awaitable[None]]
    clock: Callable[[], datetime] = _utc_now

    def open_plan_session(
        self, owner_id: UUID, viewer_id: UUID, notifier: Notifier
    ) -> PlanSession:
        """Create a planning session with its own autosave timers."""
        autosaver = PlanAutosaver(
            repository=self.plan_repository,
            notifier=notifier,
            scheduler=DebouncedScheduler(self.settings.autosave_delay_seconds),
        )
        return PlanSession(
            owner_id=owner_id,
            viewer_id=viewer_id,
            plans=self.weekly_plan_service,
            library=self.library_service,
            profiles=self.profile_service,
            meal_plans=self.meal_plan_service,
            autosaver=autosaver,
            notifier=notifier,
            timezone_name=self.settings.plan_timezone,
            clock=self.clock,
        )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    plan_repository = SupabasePlanRepository(supabase_client)
    profile_service = ProfileService(SupabaseProfileRepository(supabase_client))
    client_service = ClientService(
        SupabaseClientRepository(supabase_client),
        free_slots=resolved_settings.free_client_slots,
    )
    openai_client = OpenAIStructuredClient.create(resolved_settings.openai_api_key)
    payment_client = (
        HttpxMercadoPagoClient.create(
            access_token=resolved_settings.mercadopago_access_token,
            base_url=resolved_settings.mercadopago_base_url,
        )
        if resolved_settings.mercadopago_access_token
        else None
    )

    async def close_resources() -> None:
        await openai_client.close()
        if payment_client is not None:
            await payment_client.close()

    return AppContainer(
        settings=resolved_settings,
        identity_provider=SupabaseIdentityProvider(supabase_client),
        plan_repository=plan_repository,
        weekly_plan_service=WeeklyPlanService(plan_repository),
        library_service=LibraryService(SupabaseLibraryRepository(supabase_client)),
        profile_service=profile_service,
        recommendation_service=RecommendationService(
            client=openai_client,
            model=resolved_settings.openai_model,
            reasoning_effort=resolved_settings.openai_reasoning_effort,
            store=resolved_settings.openai_store,
        ),
        meal_plan_service=MealPlanService(
            client=openai_client,
            model=resolved_settings.openai_model,
            reasoning_effort=resolved_settings.openai_reasoning_effort,
            store=resolved_settings.openai_store,
        ),
        weight_service=WeightService(
            SupabaseWeightRepository(supabase_client),
            timezone_name=resolved_settings.plan_timezone,
        ),
        client_service=client_service,
        chat_service=ChatService(
            SupabaseChatRepository(supabase_client), profile_service
        ),
        subscription_service=SubscriptionService(
            gateway=payment_client,
            clients=client_service,
            price=resolved_settings.client_slot_price,
            currency=resolved_settings.client_slot_currency,
            back_url=resolved_settings.mercadopago_back_url,
        ),
        close_resources=close_resources,
    )
