from abc import ABC, abstractmethod

from pawfessional.domain.entities.user import User


class SessionStorePort(ABC):
    @abstractmethod
    def load_user(self) -> User | None:
        raise NotImplementedError

    @abstractmethod
    def save_user(self, user: User) -> None:
        raise NotImplementedError

    @abstractmethod
    def clear_user(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def has_seen_onboarding(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def mark_onboarding_seen(self) -> None:
        raise NotImplementedError
