"""Default permissions and system roles seeded by InitializeSystemUseCase."""

from rolegate.application.dto.seed_dto import PermissionSeed, RoleSeed


def _crud(category: str, noun: str) -> list[PermissionSeed]:
    return [
        PermissionSeed(f"{category}:create", f"Create {noun}"),
        PermissionSeed(f"{category}:read", f"View {noun}"),
        PermissionSeed(f"{category}:update", f"Update {noun}"),
        PermissionSeed(f"{category}:delete", f"Delete {noun}"),
        PermissionSeed(f"{category}:manage", f"Manage all aspects of {noun}"),
    ]


DEFAULT_PERMISSIONS: list[PermissionSeed] = [
    *_crud("supplier", "suppliers"),
    PermissionSeed("supplier:read:performance", "View supplier performance data"),
    PermissionSeed("supplier:read:risk", "View supplier risk data"),
    PermissionSeed("supplier:update:risk", "Update supplier risk assessments"),
    PermissionSeed("supplier:read:audit", "View supplier audits"),
    PermissionSeed("supplier:create:audit", "Create supplier audits"),
    PermissionSeed("supplier:export:data", "Export supplier data"),
    *_crud("customer", "customers"),
    PermissionSeed("customer:export:data", "Export customer data"),
    *_crud("inspection", "inspections"),
    PermissionSeed("inspection:schedule", "Schedule inspections"),
    PermissionSeed("inspection:conduct", "Conduct inspections"),
    PermissionSeed("inspection:approve", "Approve inspection results"),
    PermissionSeed("inspection:read:report", "View inspection reports"),
    PermissionSeed("inspection:export:report", "Export inspection reports"),
    PermissionSeed("inspection:create:defect", "Create defect records"),
    PermissionSeed("inspection:update:defect", "Update defect records"),
    *_crud("report", "reports"),
    PermissionSeed("report:export", "Export reports"),
    PermissionSeed("report:create:template", "Create report templates"),
    *_crud("user", "users"),
    PermissionSeed("user:update:role", "Change user roles"),
    PermissionSeed("user:update:permission", "Modify user permissions"),
    PermissionSeed("admin:system:settings", "Manage system settings"),
    PermissionSeed("admin:system:logs", "View system logs"),
    PermissionSeed("admin:system:monitoring", "View system monitoring"),
    PermissionSeed("admin:system:backup", "Manage system backups"),
    PermissionSeed("dashboard:read", "View dashboards"),
    PermissionSeed("dashboard:create", "Create custom dashboards"),
    PermissionSeed("dashboard:share", "Share dashboards with others"),
    *_crud("document", "documents"),
    PermissionSeed("document:approve", "Approve documents"),
]

SYSTEM_ROLES: list[RoleSeed] = [
    RoleSeed("superadmin", "Full system access with all permissions", 100, ("*",)),
    RoleSeed(
        "admin",
        "Administrative access with most permissions",
        90,
        (
            "supplier:*",
            "customer:*",
            "inspection:*",
            "report:*",
            "user:*",
            "dashboard:*",
            "document:*",
            "admin:system:logs",
            "admin:system:monitoring",
        ),
    ),
    RoleSeed(
        "manager",
        "Management access with elevated permissions",
        80,
        (
            "supplier:*",
            "customer:*",
            "inspection:*",
            "report:*",
            "dashboard:*",
            "document:*",
            "user:read",
        ),
    ),
    RoleSeed(
        "inspector",
        "Inspection and quality control permissions",
        60,
        (
            "inspection:create",
            "inspection:read",
            "inspection:update",
            "inspection:conduct",
            "inspection:read:report",
            "inspection:create:defect",
            "inspection:update:defect",
            "supplier:read",
            "document:read",
            "dashboard:read",
        ),
    ),
    RoleSeed(
        "viewer",
        "Read-only access to permitted resources",
        40,
        (
            "supplier:read",
            "customer:read",
            "inspection:read",
            "report:read",
            "dashboard:read",
            "document:read",
        ),
    ),
    RoleSeed("guest", "Limited access for external users", 10, ("dashboard:read",)),
]
