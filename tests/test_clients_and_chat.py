from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from calorie_planner.domain.profiles import UserProfile
from calorie_planner.services.chat import ChatError, ChatService, room_id
from calorie_planner.services.clients import (
    STATUS_ACTIVE,
    STATUS_PENDING,
    ClientLimitError,
    ClientService,
)
from calorie_planner.services.nutrition import PlanValidationError
from calorie_planner.services.profiles import ProfileService
from tests.conftest import (
    InMemoryChatRepository,
    InMemoryClientRepository,
    InMemoryProfileRepository,
)

NOW = datetime(2024, 5, 15, 15, tzinfo=UTC)


def test_two_clients_are_free_then_a_slot_is_needed(
    client_repository: InMemoryClientRepository, professional: UserProfile
) -> None:
    service = ClientService(client_repository)
    pro_id = professional.user_id

    first = service.add_client(pro_id, " Ana@Example.com ", NOW)
    service.add_client(pro_id, "bob@example.com", NOW + timedelta(minutes=1))

    assert first.email == "ana@example.com"
    assert first.status == STATUS_PENDING
    assert service.capacity(pro_id) == 2
    with pytest.raises(ClientLimitError):
        service.add_client(pro_id, "carl@example.com", NOW)

    assert service.activate_client_slot(pro_id) == 1
    service.add_client(pro_id, "carl@example.com", NOW + timedelta(minutes=2))
    assert [c.email for c in service.list_clients(pro_id)] == [
        "ana@example.com",
        "bob@example.com",
        "carl@example.com",
    ]


def test_add_client_rejects_duplicates_and_bad_emails(
    client_repository: InMemoryClientRepository, professional: UserProfile
) -> None:
    service = ClientService(client_repository)
    service.add_client(professional.user_id, "ana@example.com", NOW)

    with pytest.raises(PlanValidationError, match="already"):
        service.add_client(professional.user_id, "ANA@example.com", NOW)
    with pytest.raises(PlanValidationError, match="email"):
        service.add_client(professional.user_id, "not-an-email", NOW)


def test_regular_users_have_no_roster(
    client_repository: InMemoryClientRepository,
    profile_repository: InMemoryProfileRepository,
) -> None:
    user_id = uuid4()
    profile_repository.save_profile(UserProfile(user_id=user_id, display_name="U"))
    service = ClientService(client_repository)

    with pytest.raises(PlanValidationError, match="professional"):
        service.add_client(user_id, "ana@example.com", NOW)
    with pytest.raises(PlanValidationError):
        service.activate_client_slot(user_id)


def test_professional_for_reads_the_client_profile(
    client_repository: InMemoryClientRepository,
    profile_repository: InMemoryProfileRepository,
    professional: UserProfile,
) -> None:
    client_id = uuid4()
    profile_repository.save_profile(
        UserProfile(
            user_id=client_id,
            display_name="C",
            professional_id=professional.user_id,
        )
    )
    service = ClientService(client_repository)

    assert service.professional_for(client_id) == professional.user_id
    assert service.professional_for(uuid4()) is None


def _save_user(
    profile_repository: InMemoryProfileRepository, email: str | None = None
) -> UserProfile:
    profile = UserProfile(user_id=uuid4(), display_name="Ana", email=email)
    profile_repository.save_profile(profile)
    return profile


def test_accepting_an_invite_activates_the_pending_entry(
    client_repository: InMemoryClientRepository,
    profile_repository: InMemoryProfileRepository,
    professional: UserProfile,
) -> None:
    service = ClientService(client_repository)
    pro_id = professional.user_id
    service.add_client(pro_id, "ana@example.com", NOW)
    user = _save_user(profile_repository, "Ana@Example.com")

    client = service.accept_invite(pro_id, user.user_id, NOW)

    assert client.status == STATUS_ACTIVE
    assert client.client_user_id == user.user_id
    assert client.display_name == "Ana"
    assert service.list_clients(pro_id) == [client]
    assert service.professional_for(user.user_id) == pro_id
    assert service.accept_invite(pro_id, user.user_id, NOW) == client
    assert len(service.list_clients(pro_id)) == 1


def test_accepting_without_a_pending_entry_takes_a_free_slot(
    client_repository: InMemoryClientRepository,
    profile_repository: InMemoryProfileRepository,
    professional: UserProfile,
) -> None:
    service = ClientService(client_repository)
    pro_id = professional.user_id
    first = _save_user(profile_repository)
    second = _save_user(profile_repository, "bob@example.com")
    third = _save_user(profile_repository, "carl@example.com")

    created = service.accept_invite(pro_id, first.user_id, NOW)
    service.accept_invite(pro_id, second.user_id, NOW)

    assert created.status == STATUS_ACTIVE
    assert created.email == ""
    with pytest.raises(ClientLimitError):
        service.accept_invite(pro_id, third.user_id, NOW)
    assert profile_repository.profiles[third.user_id].professional_id is None


def test_invites_cannot_be_accepted_by_the_wrong_user(
    client_repository: InMemoryClientRepository,
    profile_repository: InMemoryProfileRepository,
    professional: UserProfile,
) -> None:
    service = ClientService(client_repository)
    other = UserProfile(
        user_id=uuid4(), display_name="Other", role=professional.role
    )
    profile_repository.save_profile(other)
    taken = _save_user(profile_repository)
    service.accept_invite(other.user_id, taken.user_id, NOW)
    regular = _save_user(profile_repository)

    with pytest.raises(PlanValidationError, match="own client"):
        service.accept_invite(professional.user_id, professional.user_id, NOW)
    with pytest.raises(PlanValidationError, match="another professional"):
        service.accept_invite(professional.user_id, taken.user_id, NOW)
    with pytest.raises(PlanValidationError, match="Create your profile"):
        service.accept_invite(professional.user_id, uuid4(), NOW)
    with pytest.raises(PlanValidationError, match="professional"):
        service.accept_invite(regular.user_id, taken.user_id, NOW)
    assert service.list_clients(professional.user_id) == []


def test_room_id_is_order_independent() -> None:
    first, second = uuid4(), uuid4()

    assert room_id(first, second) == room_id(second, first)


def _chat(
    profile_repository: InMemoryProfileRepository, professional: UserProfile
) -> tuple[ChatService, InMemoryChatRepository, UserProfile]:
    client = UserProfile(
        user_id=uuid4(), display_name="C", professional_id=professional.user_id
    )
    profile_repository.save_profile(client)
    repository = InMemoryChatRepository()
    service = ChatService(repository, ProfileService(profile_repository))
    return service, repository, client


def test_linked_users_exchange_messages_in_order(
    profile_repository: InMemoryProfileRepository, professional: UserProfile
) -> None:
    service, _, client = _chat(profile_repository, professional)

    service.send_message(client.user_id, professional.user_id, "second", NOW)
    service.send_message(
        professional.user_id, client.user_id, " first ", NOW - timedelta(minutes=5)
    )

    messages = service.list_messages(professional.user_id, client.user_id)
    assert [m.text for m in messages] == ["first", "second"]
    assert {m.room_id for m in messages} == {
        room_id(client.user_id, professional.user_id)
    }


def test_chat_rejects_blank_text_and_unlinked_users(
    profile_repository: InMemoryProfileRepository, professional: UserProfile
) -> None:
    service, repository, client = _chat(profile_repository, professional)

    with pytest.raises(ChatError):
        service.send_message(client.user_id, professional.user_id, "   ", NOW)
    with pytest.raises(ChatError):
        service.send_message(client.user_id, uuid4(), "hello", NOW)
    with pytest.raises(ChatError):
        service.list_messages(client.user_id, client.user_id)
    assert repository.messages == []
