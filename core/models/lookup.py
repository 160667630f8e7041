# =============================================================================
# core/models/lookup.py - Lookup Table Definitions
# =============================================================================
# Lookup tables (colors, makes, nationalities, contract statuses, ...) all
# follow the same CRUD shape. Each one is described here once and the
# generic LookupService / lookup router work from the description.
#
# A definition answers:
# - where it lives (table) and where it's served (group/slug)
# - which column is its label and how long the label may be
# - which extra columns are writable and which are required
# - what makes a label a duplicate (label alone, or label + make_id, ...)
# - which tables must not reference a row before it can be deleted
# =============================================================================

from dataclasses import dataclass, field


@dataclass(frozen=True)
class LookupReference:
    """A table whose rows point at a lookup row and block its deletion."""

    table: str
    column: str
    message: str


@dataclass(frozen=True)
class LookupDefinition:
    """Declarative description of one lookup table."""

    group: str
    slug: str
    table: str
    entity: str
    response_key: str
    item_key: str
    label_field: str = "name"
    extra_fields: tuple[str, ...] = ("description", "is_active")
    required_fields: tuple[str, ...] = ()
    search_fields: tuple[str, ...] = ("name",)
    filter_fields: tuple[str, ...] = ()
    unique_with: tuple[str, ...] = ()
    duplicate_message: str | None = None
    references: tuple[LookupReference, ...] = field(default_factory=tuple)
    min_label_length: int = 1
    max_label_length: int = 100
    order_by: str = "code"

    @property
    def path(self) -> str:
        return f"/{self.group}/{self.slug}"

    @property
    def writable_fields(self) -> tuple[str, ...]:
        return (self.label_field,) + self.extra_fields

    @property
    def label_title(self) -> str:
        return self.label_field.replace("_", " ").capitalize()


# =============================================================================
# Registry
# =============================================================================

VEHICLE_CONFIGURATION = "vehicle-configuration"
CONTRACT_CONFIGURATION = "contract-configuration"
CUSTOMER_CONFIGURATIONS = "customer-configurations"


def _customer_lookup(slug: str, table: str, label: str, entity: str, plural: str, reference_column: str | None) -> LookupDefinition:
    """Customer lookups share one shape: a 2-100 char label plus description."""
    references = ()
    if reference_column:
        references = (
            LookupReference(
                "customers",
                reference_column,
                f"Cannot delete {entity.lower()}. It is being used by existing customers.",
            ),
        )
    return LookupDefinition(
        group=CUSTOMER_CONFIGURATIONS,
        slug=slug,
        table=table,
        entity=entity,
        response_key=plural,
        item_key=label,
        label_field=label,
        search_fields=(label,),
        duplicate_message=f"{entity} already exists",
        references=references,
        min_label_length=2,
    )


LOOKUPS: tuple[LookupDefinition, ...] = (
    # -------------------------------------------------------------------------
    # Vehicle configuration
    # -------------------------------------------------------------------------
    LookupDefinition(
        group=VEHICLE_CONFIGURATION,
        slug="colors",
        table="vehicle_colors",
        entity="Color",
        response_key="colors",
        item_key="color",
        extra_fields=("hex_code", "description", "is_active"),
        search_fields=("name", "description"),
        duplicate_message="Color name already exists",
        references=(
            LookupReference("vehicles", "color_id", "Cannot delete color that has associated vehicles"),
        ),
    ),
    LookupDefinition(
        group=VEHICLE_CONFIGURATION,
        slug="makes",
        table="vehicle_makes",
        entity="Make",
        response_key="makes",
        item_key="make",
        search_fields=("name", "description"),
        duplicate_message="Make name already exists",
        references=(
            LookupReference("vehicle_models", "make_id", "Cannot delete make that has associated models"),
            LookupReference("vehicles", "make_id", "Cannot delete make that has associated vehicles"),
        ),
    ),
    LookupDefinition(
        group=VEHICLE_CONFIGURATION,
        slug="models",
        table="vehicle_models",
        entity="Model",
        response_key="models",
        item_key="model",
        extra_fields=("make_id", "description", "is_active"),
        required_fields=("make_id",),
        search_fields=("name", "description"),
        filter_fields=("make_id",),
        unique_with=("make_id",),
        duplicate_message="Model name already exists for this make",
        references=(
            LookupReference("vehicles", "model_id", "Cannot delete model that has associated vehicles"),
        ),
    ),
    LookupDefinition(
        group=VEHICLE_CONFIGURATION,
        slug="features",
        table="vehicle_features",
        entity="Feature",
        response_key="features",
        item_key="feature",
        search_fields=("name", "description"),
        duplicate_message="Feature name already exists",
    ),
    LookupDefinition(
        group=VEHICLE_CONFIGURATION,
        slug="owners",
        table="vehicle_owners",
        entity="Owner",
        response_key="owners",
        item_key="owner",
        extra_fields=("is_active",),
        duplicate_message="Owner name already exists",
        references=(
            LookupReference("vehicles", "owner_id", "Cannot delete owner that has associated vehicles"),
        ),
    ),
    LookupDefinition(
        group=VEHICLE_CONFIGURATION,
        slug="actual-users",
        table="vehicle_actual_users",
        entity="Actual user",
        response_key="actual_users",
        item_key="actual_user",
        extra_fields=("is_active",),
        duplicate_message="Actual user name already exists",
        references=(
            LookupReference("vehicles", "actual_user_id", "Cannot delete actual user that has associated vehicles"),
        ),
    ),
    LookupDefinition(
        group=VEHICLE_CONFIGURATION,
        slug="statuses",
        table="vehicle_statuses",
        entity="Vehicle status",
        response_key="statuses",
        item_key="status",
        extra_fields=("color", "description", "is_active"),
        search_fields=("name", "description"),
        duplicate_message="Vehicle status already exists",
        references=(
            LookupReference("vehicles", "status_id", "Cannot delete status that is being used by vehicles"),
        ),
    ),
    # -------------------------------------------------------------------------
    # Contract configuration
    # -------------------------------------------------------------------------
    LookupDefinition(
        group=CONTRACT_CONFIGURATION,
        slug="add-ons",
        table="contract_add_ons",
        entity="Add-on",
        response_key="add_ons",
        item_key="add_on",
        extra_fields=("description", "amount", "is_active"),
        search_fields=("name", "description"),
        duplicate_message="Add-on name already exists",
    ),
    LookupDefinition(
        group=CONTRACT_CONFIGURATION,
        slug="statuses",
        table="contract_statuses",
        entity="Contract status",
        response_key="statuses",
        item_key="status",
        extra_fields=("color", "description", "is_active"),
        search_fields=("name", "description"),
        duplicate_message="Contract status already exists",
        references=(
            LookupReference("contracts", "status_id", "Cannot delete status that is being used by contracts"),
        ),
    ),
    # -------------------------------------------------------------------------
    # Customer configurations
    # -------------------------------------------------------------------------
    _customer_lookup("nationalities", "customer_nationalities", "nationality", "Nationality", "nationalities", "nationality_id"),
    _customer_lookup("professions", "customer_professions", "profession", "Profession", "professions", None),
    _customer_lookup("classifications", "customer_classifications", "classification", "Classification", "classifications", "classification_id"),
    _customer_lookup("license-types", "customer_license_types", "license_type", "License type", "license_types", "license_type_id"),
    LookupDefinition(
        group=CUSTOMER_CONFIGURATIONS,
        slug="statuses",
        table="customer_statuses",
        entity="Customer status",
        response_key="statuses",
        item_key="status",
        extra_fields=("color", "description", "is_active"),
        duplicate_message="Customer status already exists",
        references=(
            LookupReference("customers", "status_id", "Cannot delete status that is being used by customers"),
        ),
    ),
)


def get_lookup(group: str, slug: str) -> LookupDefinition:
    """Find a registered lookup by its URL group and slug."""
    for definition in LOOKUPS:
        if definition.group == group and definition.slug == slug:
            return definition
    raise KeyError(f"Unknown lookup: {group}/{slug}")
