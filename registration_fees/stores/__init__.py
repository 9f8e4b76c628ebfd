from registration_fees.stores.interfaces import ConferenceResolver, FeeStore, RegistrationStore

__all__ = ["FeeStore", "RegistrationStore", "ConferenceResolver"]
