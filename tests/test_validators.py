"""
Tests for input validation utilities
"""
import pytest

from validators import (
    ValidationError,
    sanitize_string,
    validate_payload,
    RegisterRequest,
    ProjectCreate,
    ProjectUpdate,
    QuoteRequest,
    QuoteUpdate,
    ReviewCreate,
    RenovationEstimate,
    ConstructionEstimate,
)


@pytest.mark.unit
class TestSanitization:
    """Tests for string sanitization"""

    def test_sanitize_removes_null_bytes(self):
        """Test that null bytes are stripped"""
        assert sanitize_string('kit\x00chen') == 'kitchen'

    def test_sanitize_trims_and_limits(self):
        """Test trimming and length limit"""
        assert sanitize_string('  granite  ') == 'granite'
        assert len(sanitize_string('a' * 50, max_length=10)) == 10

    def test_schema_sanitizes_strings(self):
        """Test that schemas run every string through sanitization"""
        payload = validate_payload(ReviewCreate, {'contractorId': ' c1\x00 ', 'rating': 5})
        assert payload.contractor_id == 'c1'


@pytest.mark.unit
class TestValidatePayload:
    """Tests for the validation entry point and its messages"""

    def test_non_object_body(self):
        """Test that a missing or non-object body is rejected"""
        for body in (None, [], 'text'):
            with pytest.raises(ValidationError) as excinfo:
                validate_payload(ProjectCreate, body)
            assert excinfo.value.message == 'Validation error: Request body must be a JSON object'

    def test_message_names_field(self):
        """Test that the message names the offending field"""
        with pytest.raises(ValidationError) as excinfo:
            validate_payload(ProjectCreate, {'type': 'renovation', 'description': 'x'})
        assert excinfo.value.message == 'Validation error: Field required at "name"'
        assert excinfo.value.field == 'name'

    def test_multiple_errors_joined(self):
        """Test that every failure is reported"""
        with pytest.raises(ValidationError) as excinfo:
            validate_payload(ProjectCreate, {'description': 'x'})
        message = excinfo.value.message
        assert message.startswith('Validation error: ')
        assert '"name"' in message
        assert '"type"' in message
        assert '; ' in message

    def test_unknown_keys_ignored(self):
        payload = validate_payload(ReviewCreate, {'contractorId': 'c1', 'rating': 4, 'stars': 99})
        assert payload.to_api() == {'contractorId': 'c1', 'projectId': None, 'rating': 4, 'review': None}


@pytest.mark.unit
class TestRegisterRequest:
    """Tests for registration payloads"""

    def test_valid(self):
        payload = validate_payload(RegisterRequest, {
            'username': 'asha',
            'password': 's3cure-pass',
            'email': 'asha@example.in',
            'name': 'Asha',
        })
        assert payload.username == 'asha'

    def test_invalid_email(self):
        with pytest.raises(ValidationError) as excinfo:
            validate_payload(RegisterRequest, {
                'username': 'asha', 'password': 's3cure-pass', 'email': 'asha@', 'name': 'Asha',
            })
        assert excinfo.value.message == 'Validation error: Invalid email format at "email"'

    def test_short_password(self):
        with pytest.raises(ValidationError) as excinfo:
            validate_payload(RegisterRequest, {
                'username': 'asha', 'password': '123', 'email': 'asha@example.in', 'name': 'Asha',
            })
        assert excinfo.value.field == 'password'


@pytest.mark.unit
class TestProjectSchemas:
    """Tests for project payloads"""

    def test_type_alias_round_trip(self):
        """Test that 'type' maps to project_type and back"""
        payload = validate_payload(ProjectCreate, {
            'name': 'Kitchen', 'type': 'renovation', 'description': 'Modular kitchen',
        })
        assert payload.project_type == 'renovation'
        data = payload.to_api()
        assert data['type'] == 'renovation'
        assert data['status'] == 'planning'
        assert data['estimatedCostMin'] is None

    @pytest.mark.parametrize('status', ['planning', 'in-progress', 'completed'])
    def test_known_statuses(self, status):
        payload = validate_payload(ProjectUpdate, {'status': status})
        assert payload.status == status

    def test_unknown_status(self):
        with pytest.raises(ValidationError) as excinfo:
            validate_payload(ProjectUpdate, {'status': 'on-hold'})
        assert excinfo.value.field == 'status'

    def test_partial_dump_only_has_sent_fields(self):
        """Test that a partial update never blanks fields it was not given"""
        payload = validate_payload(ProjectUpdate, {'status': 'completed'})
        assert payload.to_api(partial=True) == {'status': 'completed'}

    def test_partial_dump_keeps_explicit_null(self):
        """Test that sending null clears an optional field"""
        payload = validate_payload(ProjectUpdate, {'status': 'completed', 'timeline': None})
        assert payload.to_api(partial=True) == {'status': 'completed', 'timeline': None}

    @pytest.mark.parametrize('field', ['name', 'type', 'description', 'status'])
    def test_required_project_fields_cannot_be_null(self, field):
        with pytest.raises(ValidationError) as excinfo:
            validate_payload(ProjectUpdate, {field: None})
        assert excinfo.value.field == field
        assert 'cannot be null' in excinfo.value.message

    def test_negative_cost(self):
        with pytest.raises(ValidationError):
            validate_payload(ProjectCreate, {
                'name': 'Kitchen', 'type': 'renovation', 'description': 'x', 'estimatedCostMin': -1,
            })


@pytest.mark.unit
class TestQuoteSchemas:
    """Tests for quote payloads"""

    def test_contractor_ids_deduplicated_in_order(self):
        payload = validate_payload(QuoteRequest, {
            'projectId': 'p1', 'contractorIds': ['c2', 'c1', 'c2'],
        })
        assert payload.contractor_ids == ['c2', 'c1']

    def test_contractor_ids_required(self):
        with pytest.raises(ValidationError) as excinfo:
            validate_payload(QuoteRequest, {'projectId': 'p1', 'contractorIds': []})
        assert excinfo.value.field == 'contractorIds'

    @pytest.mark.parametrize('status', ['pending', 'received', 'accepted', 'rejected', 'completed'])
    def test_quote_statuses(self, status):
        assert validate_payload(QuoteUpdate, {'status': status}).status == status

    def test_quote_status_cannot_be_null(self):
        with pytest.raises(ValidationError) as excinfo:
            validate_payload(QuoteUpdate, {'status': None})
        assert excinfo.value.field == 'status'

    def test_quote_amount_can_be_cleared(self):
        payload = validate_payload(QuoteUpdate, {'amount': None})
        assert payload.to_api(partial=True) == {'amount': None}


@pytest.mark.unit
class TestReviewCreate:
    """Tests for review payloads"""

    @pytest.mark.parametrize('rating', [1, 3, 5])
    def test_ratings_in_range(self, rating):
        assert validate_payload(ReviewCreate, {'contractorId': 'c1', 'rating': rating}).rating == rating

    @pytest.mark.parametrize('rating', [0, 6, -2])
    def test_ratings_out_of_range(self, rating):
        with pytest.raises(ValidationError) as excinfo:
            validate_payload(ReviewCreate, {'contractorId': 'c1', 'rating': rating})
        assert excinfo.value.field == 'rating'


@pytest.mark.unit
class TestEstimateSchemas:
    """Tests for estimate payloads"""

    def test_renovation_fractional_area(self):
        payload = validate_payload(RenovationEstimate, {
            'renovationType': 'bathroom',
            'squareFootage': 72.5,
            'qualityLevel': 'premium',
            'location': 'Mumbai',
            'scope': 'full retile',
        })
        assert payload.square_footage == 72.5

    def test_construction_numbers_become_text(self):
        payload = validate_payload(ConstructionEstimate, {
            'constructionType': 'duplex',
            'squareFootage': 1800,
            'stories': 2,
            'qualityLevel': 'standard',
            'location': 'Jaipur',
            'lotSize': 2400,
        })
        assert payload.stories == '2'
        assert payload.lot_size == '2400'
        assert payload.details is None

    def test_construction_requires_location(self):
        with pytest.raises(ValidationError) as excinfo:
            validate_payload(ConstructionEstimate, {
                'constructionType': 'duplex',
                'squareFootage': 1800,
                'stories': '2',
                'qualityLevel': 'standard',
            })
        assert excinfo.value.field == 'location'
