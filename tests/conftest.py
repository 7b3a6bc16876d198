"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from uuid import UUID, uuid4

import pytest

from calorie_planner.config import Settings
from calorie_planner.containers import AppContainer
from calorie_planner.domain.nutrition import CustomMeal, FoodItem
from calorie_planner.domain.plans import DailyPlan, Goals
from calorie_planner.domain.profiles import ROLE_PROFESSIONAL, Client, UserProfile
from calorie_planner.domain.tracking import ChatMessage, WeightEntry
from calorie_planner.services.auth import AuthenticationError, IdentityProvider
from calorie_planner.services.chat import ChatRepository, ChatService
from calorie_planner.services.clients import ClientRepository, ClientService
from calorie_planner.services.library import LibraryRepository, LibraryService
from calorie_planner.services.meal_plans import MealPlanService
from calorie_planner.services.notifications import Notification, Notifier
from calorie_planner.services.payments import PaymentGateway, SubscriptionService
from calorie_planner.services.plans import PlanRepository, WeeklyPlanService
from calorie_planner.services.profiles import ProfileRepository, ProfileService
from calorie_planner.services.recommendations import (
    RecommendationService,
    StructuredCompletionClient,
)
from calorie_planner.services.weight import WeightRepository, WeightService

# Wednesday 2024-05-15 12:00 in Buenos Aires.
FIXED_NOW = datetime(2024, 5, 15, 15, 0, tzinfo=UTC)
TODAY_KEY = "2024-05-15"
WEEK_KEYS = [
    "2024-05-13",
    "2024-05-14",
    "2024-05-15",
    "2024-05-16",
    "2024-05-17",
    "2024-05-18",
    "2024-05-19",
]


def make_food(
    food_id: str = "rice",
    name: str = "Rice",
    calories: float = 130.0,
    serving_size: float = 100.0,
) -> FoodItem:
    return FoodItem(
        id=food_id,
        name=name,
        calories=calories,
        protein=2.7,
        carbs=28.0,
        fats=0.3,
        serving_size=serving_size,
        serving_unit="g",
    )


@dataclass
class InMemoryPlanRepository(PlanRepository):
    plans: dict[tuple[UUID, str], DailyPlan] = field(default_factory=dict)
    reads: list[tuple[UUID, str]] = field(default_factory=list)
    writes: list[tuple[UUID, str, DailyPlan]] = field(default_factory=list)
    fail_reads: bool = False
    fail_writes: bool = False

    def get_daily_plan(self, owner_id: UUID, date_key: str) -> DailyPlan | None:
        self.reads.append((owner_id, date_key))
        if self.fail_reads:
            raise RuntimeError("store unavailable")
        return self.plans.get((owner_id, date_key))

    def save_daily_plan(self, owner_id: UUID, date_key: str, plan: DailyPlan) -> None:
        if self.fail_writes:
            raise RuntimeError("store unavailable")
        self.writes.append((owner_id, date_key, plan))
        self.plans[(owner_id, date_key)] = plan


@dataclass
class InMemoryLibraryRepository(LibraryRepository):
    foods: dict[UUID, list[FoodItem]] = field(default_factory=dict)
    meals: dict[UUID, list[CustomMeal]] = field(default_factory=dict)

    def list_foods(self, user_id: UUID) -> list[FoodItem]:
        return list(self.foods.get(user_id, []))

    def create_food(self, user_id: UUID, food: FoodItem) -> FoodItem:
        if not food.id:
            food = replace(food, id=str(uuid4()))
        self.foods.setdefault(user_id, []).append(food)
        return food

    def create_foods(self, user_id: UUID, foods: list[FoodItem]) -> list[FoodItem]:
        self.foods.setdefault(user_id, []).extend(foods)
        return list(foods)

    def delete_food(self, user_id: UUID, food_id: str) -> None:
        self.foods[user_id] = [
            food for food in self.foods.get(user_id, []) if food.id != food_id
        ]

    def list_custom_meals(self, user_id: UUID) -> list[CustomMeal]:
        return list(self.meals.get(user_id, []))

    def create_custom_meal(self, user_id: UUID, meal: CustomMeal) -> CustomMeal:
        if not meal.id:
            meal = replace(meal, id=str(uuid4()))
        self.meals.setdefault(user_id, []).append(meal)
        return meal

    def delete_custom_meal(self, user_id: UUID, meal_id: str) -> None:
        self.meals[user_id] = [
            meal for meal in self.meals.get(user_id, []) if meal.id != meal_id
        ]


@dataclass
class InMemoryProfileRepository(ProfileRepository):
    profiles: dict[UUID, UserProfile] = field(default_factory=dict)
    goals: dict[UUID, Goals] = field(default_factory=dict)

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        return self.profiles.get(user_id)

    def save_profile(self, profile: UserProfile) -> UserProfile:
        self.profiles[profile.user_id] = profile
        return profile

    def get_goals(self, user_id: UUID) -> Goals | None:
        return self.goals.get(user_id)

    def save_goals(self, user_id: UUID, goals: Goals) -> Goals:
        self.goals[user_id] = goals
        return goals


@dataclass
class InMemoryClientRepository(ClientRepository):
    profiles: InMemoryProfileRepository
    clients: list[Client] = field(default_factory=list)

    def list_clients(self, professional_id: UUID) -> list[Client]:
        return [c for c in self.clients if c.professional_id == professional_id]

    def create_client(self, client: Client) -> Client:
        self.clients.append(client)
        return client

    def update_client(self, client: Client) -> Client:
        self.clients = [client if c.id == client.id else c for c in self.clients]
        return client

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        return self.profiles.get_profile(user_id)

    def increment_paid_slots(self, professional_id: UUID) -> int:
        profile = self.profiles.profiles[professional_id]
        updated = replace(profile, paid_client_slots=profile.paid_client_slots + 1)
        self.profiles.profiles[professional_id] = updated
        return updated.paid_client_slots

    def set_professional(self, user_id: UUID, professional_id: UUID) -> UserProfile:
        updated = replace(
            self.profiles.profiles[user_id], professional_id=professional_id
        )
        self.profiles.profiles[user_id] = updated
        return updated


@dataclass
class InMemoryWeightRepository(WeightRepository):
    entries: dict[tuple[UUID, str], WeightEntry] = field(default_factory=dict)

    def get_entry(self, user_id: UUID, week_start: str) -> WeightEntry | None:
        return self.entries.get((user_id, week_start))

    def save_entry(self, entry: WeightEntry) -> WeightEntry:
        self.entries[(entry.user_id, entry.week_start)] = entry
        return entry

    def list_entries(self, user_id: UUID) -> list[WeightEntry]:
        return [entry for key, entry in self.entries.items() if key[0] == user_id]


@dataclass
class InMemoryChatRepository(ChatRepository):
    messages: list[ChatMessage] = field(default_factory=list)

    def add_message(self, message: ChatMessage) -> ChatMessage:
        self.messages.append(message)
        return message

    def list_messages(self, room_id: str) -> list[ChatMessage]:
        return [message for message in self.messages if message.room_id == room_id]


@dataclass
class FakeStructuredClient(StructuredCompletionClient):
    responses: list[object] = field(default_factory=list)
    calls: list[dict[str, object]] = field(default_factory=list)

    async def complete(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        schema_name: str,
        schema: dict[str, object],
        instructions: str,
        prompt: str,
    ) -> dict[str, object]:
        self.calls.append(
            {"model": model, "schema_name": schema_name, "prompt": prompt}
        )
        if not self.responses:
            raise RuntimeError("no response queued")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response  # type: ignore[return-value]


@dataclass
class FakeIdentityProvider(IdentityProvider):
    tokens: dict[str, UUID] = field(default_factory=dict)

    def user_id_for_token(self, token: str) -> UUID:
        if token not in self.tokens:
            raise AuthenticationError("Invalid access token")
        return self.tokens[token]


@dataclass
class RecordingNotifier(Notifier):
    notifications: list[Notification] = field(default_factory=list)

    async def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)


@dataclass
class FakePaymentGateway(PaymentGateway):
    preapprovals: dict[str, dict[str, object]] = field(default_factory=dict)
    created: list[dict[str, object]] = field(default_factory=list)

    async def create_preapproval(self, payload: dict[str, object]) -> dict[str, object]:
        self.created.append(payload)
        return {"id": "pre-1", "init_point": "https://pay.example/checkout/pre-1"}

    async def get_preapproval(self, preapproval_id: str) -> dict[str, object]:
        return self.preapprovals[preapproval_id]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        openai_api_key="openai-key",
        mercadopago_access_token="mp-token",
        autosave_delay_seconds=0.05,
    )


@pytest.fixture
def user_id() -> UUID:
    return uuid4()


@pytest.fixture
def plan_repository() -> InMemoryPlanRepository:
    return InMemoryPlanRepository()


@pytest.fixture
def library_repository() -> InMemoryLibraryRepository:
    return InMemoryLibraryRepository()


@pytest.fixture
def profile_repository() -> InMemoryProfileRepository:
    return InMemoryProfileRepository()


@pytest.fixture
def client_repository(
    profile_repository: InMemoryProfileRepository,
) -> InMemoryClientRepository:
    return InMemoryClientRepository(profiles=profile_repository)


@pytest.fixture
def structured_client() -> FakeStructuredClient:
    return FakeStructuredClient()


@pytest.fixture
def payment_gateway() -> FakePaymentGateway:
    return FakePaymentGateway()


@pytest.fixture
def identity_provider(user_id: UUID) -> FakeIdentityProvider:
    return FakeIdentityProvider(tokens={"user-token": user_id})


@pytest.fixture
def professional(profile_repository: InMemoryProfileRepository) -> UserProfile:
    profile = UserProfile(
        user_id=uuid4(), display_name="Dr. Diet", role=ROLE_PROFESSIONAL
    )
    profile_repository.save_profile(profile)
    return profile


@pytest.fixture
def container(  # noqa: PLR0913
    settings: Settings,
    plan_repository: InMemoryPlanRepository,
    library_repository: InMemoryLibraryRepository,
    profile_repository: InMemoryProfileRepository,
    client_repository: InMemoryClientRepository,
    structured_client: FakeStructuredClient,
    payment_gateway: FakePaymentGateway,
    identity_provider: FakeIdentityProvider,
) -> AppContainer:
    profile_service = ProfileService(profile_repository)
    client_service = ClientService(client_repository)

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        identity_provider=identity_provider,
        plan_repository=plan_repository,
        weekly_plan_service=WeeklyPlanService(plan_repository),
        library_service=LibraryService(library_repository),
        profile_service=profile_service,
        recommendation_service=RecommendationService(
            client=structured_client,
            model=settings.openai_model,
            reasoning_effort=settings.openai_reasoning_effort,
            store=settings.openai_store,
        ),
        meal_plan_service=MealPlanService(
            client=structured_client,
            model=settings.openai_model,
            reasoning_effort=settings.openai_reasoning_effort,
            store=settings.openai_store,
        ),
        weight_service=WeightService(InMemoryWeightRepository()),
        client_service=client_service,
        chat_service=ChatService(InMemoryChatRepository(), profile_service),
        subscription_service=SubscriptionService(
            gateway=payment_gateway,
            clients=client_service,
            price=5000.0,
            currency="ARS",
            back_url="https://app.example/pro",
        ),
        close_resources=close_resources,
        clock=lambda: FIXED_NOW,
    )
