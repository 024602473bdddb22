# src/registry/core/initial_data.py
import logging

from src.registry.core.config import Settings
from src.registry.core.security import CredentialService
from src.registry.core.store import RegistryStore

logger = logging.getLogger(__name__)

# provisioning-only fallback, rotation is forced on first login
DEVELOPMENT_ADMIN_PASSWORD = "changeMe123"


async def init_first_admin(store: RegistryStore, credentials: CredentialService, settings: Settings) -> bool:
    username = settings.FIRST_ADMIN_USERNAME
    password = settings.FIRST_ADMIN_PASSWORD

    if await store.get_admin(username) is not None:
        logger.info("Admin %s already exists", username)
        return False

    if not password:
        if not settings.is_development:
            logger.warning("FIRST_ADMIN_PASSWORD not set, skipping admin provisioning")
            return False
        logger.warning(
            "FIRST_ADMIN_PASSWORD not set; provisioning %s with the development default. "
            "The password must be changed on first login.", username,
        )
        password = DEVELOPMENT_ADMIN_PASSWORD

    created = await store.ensure_admin(
        username,
        credentials.hash_password(password),
        must_change_password=True,
    )
    if created:
        logger.info("Admin %s provisioned", username)
    return created
