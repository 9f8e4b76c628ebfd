from django.apps import AppConfig


class RegistrationFeesConfig(AppConfig):
    name = "registration_fees"
    verbose_name = "Registration fees"

    def ready(self) -> None:
        from registration_fees import signals  # noqa: F401
