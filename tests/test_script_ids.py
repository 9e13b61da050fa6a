"""Tests for script ID generation."""

from dml_workbench.script_ids import (
    SCRIPT_ID_MAX_LENGTH,
    ScriptIdAllocator,
    abbreviate,
    list_script_id,
    record_script_id,
    shorten,
    shorten_pair,
)


class TestAbbreviation:
    """Tests for the abbreviation pass."""

    def test_whole_segments_only(self):
        """Test that only complete underscore segments are replaced."""
        assert abbreviate("employee_department") == "emp_dept"
        assert abbreviate("employees_x") == "employees_x"

    def test_shorten_keeps_short_ids(self):
        """Test that IDs within the limit are untouched, even abbreviable ones."""
        assert shorten("employee", 27) == "employee"

    def test_shorten_truncates_after_abbreviating(self):
        """Test the hard cut when abbreviation is not enough."""
        result = shorten("abcdefghij_klmnopqrst_uvwxyz", 11)

        assert result == "abcdefghij"

    def test_shorten_pair_keeps_boundary(self):
        """Test that the entity part is trimmed before the field part."""
        result = shorten_pair("verylongentityname", "field", 15)

        assert result == "verylonge_field"
        assert len(result) <= 15


class TestScriptIds:
    """Tests for full script IDs."""

    def test_record_script_id(self):
        """Test the record prefix and lower-casing."""
        assert record_script_id("Employee_Data") == "customrecord_employee_data"
        assert record_script_id("data", prefix="acme_") == "customrecord_acme_data"

    def test_list_script_id(self):
        """Test the list prefix."""
        assert list_script_id("priority_levels") == "customlist_priority_levels"

    def test_long_ids_respect_ceiling(self):
        """Test that overlong record and list IDs are cut to 40 characters."""
        long_name = "customer_transaction_management_configuration_environment"

        assert len(record_script_id(long_name)) <= SCRIPT_ID_MAX_LENGTH
        assert len(list_script_id(long_name)) <= SCRIPT_ID_MAX_LENGTH
        assert record_script_id(long_name).startswith("customrecord_cust_txn_mgmt")


class TestScriptIdAllocator:
    """Tests for per-statement field ID allocation."""

    def test_simple_field(self):
        """Test a field ID that needs no shortening."""
        allocator = ScriptIdAllocator("e")

        assert allocator.allocate("employee_name") == "custrecord_e_employee_name"

    def test_duplicates_get_suffixes(self):
        """Test that colliding script IDs get numbered suffixes."""
        allocator = ScriptIdAllocator("rec")

        assert allocator.allocate("amount") == "custrecord_rec_amount"
        assert allocator.allocate("amount") == "custrecord_rec_amount_2"
        assert allocator.allocate("AMOUNT") == "custrecord_rec_amount_3"

    def test_long_collisions_stay_within_ceiling(self):
        """Test that suffixed IDs still fit."""
        allocator = ScriptIdAllocator("some_quite_long_entity_name")
        ids = [allocator.allocate("an_even_longer_field_name_for_testing") for _ in range(12)]

        assert len(set(ids)) == 12
        assert all(len(i) <= SCRIPT_ID_MAX_LENGTH for i in ids)
