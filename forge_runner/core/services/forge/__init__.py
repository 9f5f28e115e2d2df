"""
Forge toolchain service — package re-exports.

    version_probe  which foundry revision is installed (read-only)
    installer      cargo install --git at a pinned revision
    workflow       ensure-and-test / force-install orchestration
"""

from forge_runner.core.services.forge.installer import (  # noqa: F401
    FOUNDRY_GIT_URL,
    install_command,
    install_forge,
)
from forge_runner.core.services.forge.version_probe import (  # noqa: F401
    FORGE_BINARY,
    FOUNDRY_SOURCE_PACKAGE,
    InstalledBinaryRecord,
    QueryError,
    forge_status,
    get_installed_revision,
    is_revision_installed,
    parse_install_list,
    parse_installed_revision,
    revision_matches,
)
from forge_runner.core.services.forge.workflow import (  # noqa: F401
    FORGE_ARTIFACTS_DIR,
    HARDHAT_ARTIFACTS_DIR,
    WorkflowReport,
    check_and_install,
    ensure_and_test,
    force_install,
)
