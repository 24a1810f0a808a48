"""
Input sanitizer and validator: sanitising, passwords, enums, bodies.
"""
import pytest

from supermock.errors import MalformedRequestError, PayloadTooLargeError, ValidationError
from supermock.models.enums import AccountClass, EnrollmentType, MemberRole
from supermock.services.validation import (
    normalize_password,
    parse_enum,
    parse_json_body,
    validate_email,
    validate_member_request,
    validate_member_update,
    validate_password,
    validate_student_request,
    validate_student_update,
)
from supermock.utils.string_helpers import normalize_email, sanitize_string


class TestSanitizeString:
    def test_strips_unsafe_characters(self):
        assert sanitize_string("<b>Al'ice</b>") == "bAlice/b"

    def test_trims_and_truncates(self):
        assert sanitize_string("  abcdef  ", max_len=3) == "abc"

    def test_non_string_is_empty(self):
        assert sanitize_string(42) == ""
        assert sanitize_string(None) == ""

    def test_backtick_and_backslash(self):
        assert sanitize_string("a`b\\c\"d") == "abcd"


class TestEmail:
    def test_normalize(self):
        assert normalize_email("  Foo@Bar.COM ") == "foo@bar.com"

    def test_normalize_non_string(self):
        assert normalize_email(["a@b.co"]) == ""

    def test_valid(self):
        assert validate_email("a.b+c@mail.example.org").is_valid

    def test_missing_tld(self):
        result = validate_email("a@b")
        assert not result.is_valid
        assert result.error_message == "Invalid email format."


class TestPasswordPolicies:
    @pytest.mark.parametrize("password", ["Abcdefg1", "Zz9zzzzzzz"])
    def test_staff_accepts(self, password):
        assert validate_password(password, AccountClass.STAFF).is_valid

    @pytest.mark.parametrize("password", ["abcdefg1", "ABCDEFG1", "Abcdefgh", "Abc1"])
    def test_staff_rejects(self, password):
        assert not validate_password(password, AccountClass.STAFF).is_valid

    def test_student_exactly_eight_digits(self):
        assert validate_password("12345678", AccountClass.STUDENT).is_valid
        assert not validate_password("1234567", AccountClass.STUDENT).is_valid
        assert not validate_password("123456789", AccountClass.STUDENT).is_valid
        assert not validate_password("1234567a", AccountClass.STUDENT).is_valid

    def test_non_ascii_digits_rejected(self):
        assert not validate_password("\u0661\u0662\u0663\u0664\u0665\u0666\u0667\u0668", AccountClass.STUDENT).is_valid
        assert not validate_password("Aaaaaaa\u0663", AccountClass.STAFF).is_valid

    def test_student_password_trimmed(self):
        assert normalize_password(" 12345678 ", AccountClass.STUDENT) == "12345678"

    def test_staff_password_verbatim(self):
        assert normalize_password(" Abcdefg1 ", AccountClass.STAFF) == " Abcdefg1 "


class TestParseEnum:
    def test_valid_value(self):
        assert parse_enum("visitor", EnrollmentType) is EnrollmentType.VISITOR

    def test_default_when_invalid(self):
        assert parse_enum("vip", EnrollmentType, default=EnrollmentType.REGULAR) is EnrollmentType.REGULAR

    def test_choices_exclude_owner(self):
        choices = (MemberRole.ADMIN, MemberRole.EXAMINER)
        assert parse_enum("owner", MemberRole, choices=choices) is None

    def test_non_string(self):
        assert parse_enum(1, MemberRole) is None


class TestParseJsonBody:
    def test_object(self):
        assert parse_json_body(b'{"a": 1}', 8, 8192) == {"a": 1}

    def test_declared_length_over_cap(self):
        with pytest.raises(PayloadTooLargeError):
            parse_json_body(b"{}", 9000, 8192)

    def test_actual_length_over_cap(self):
        with pytest.raises(PayloadTooLargeError):
            parse_json_body(b'{"a": "' + b"x" * 9000 + b'"}', None, 8192)

    def test_invalid_json(self):
        with pytest.raises(MalformedRequestError) as excinfo:
            parse_json_body(b"{nope", None, 8192)
        assert excinfo.value.message == "Invalid JSON body."

    def test_array_rejected(self):
        with pytest.raises(MalformedRequestError):
            parse_json_body(b"[1, 2]", None, 8192)


class TestMemberRequest:
    def test_valid(self, member_body):
        request = validate_member_request(member_body)
        assert request.email == "ada@example.com"
        assert request.role is MemberRole.EXAMINER
        assert "Secret123" not in repr(request)

    def test_all_violations_joined(self):
        with pytest.raises(ValidationError) as excinfo:
            validate_member_request({"role": "owner"})
        error = excinfo.value
        assert error.status_code == 422
        assert error.errors == [
            "Full name is required.",
            "Invalid email format.",
            "Password must be at least 8 characters and include uppercase, lowercase, and a number.",
            "Center ID is required.",
            "Role must be 'admin' or 'examiner'.",
        ]
        assert error.message == " ".join(error.errors)

    def test_name_is_sanitised(self, member_body):
        member_body["full_name"] = "<script>Ada</script>"
        assert validate_member_request(member_body).full_name == "scriptAda/script"


class TestStudentRequest:
    def test_valid_with_blank_optionals(self, student_body):
        request = validate_student_request(student_body)
        assert request.password == "12345678"
        assert request.phone is None
        assert request.enrollment_type is EnrollmentType.MOCK_ONLY

    def test_unknown_enrollment_defaults_regular(self, student_body):
        student_body["enrollment_type"] = "premium"
        assert validate_student_request(student_body).enrollment_type is EnrollmentType.REGULAR

    def test_field_caps(self, student_body):
        student_body["address"] = "x" * 600
        student_body["date_of_birth"] = "2001-02-03T00:00"
        request = validate_student_request(student_body)
        assert len(request.address) == 500
        assert request.date_of_birth == "2001-02-03"

    def test_password_message(self, student_body):
        student_body["password"] = "abc"
        with pytest.raises(ValidationError) as excinfo:
            validate_student_request(student_body)
        assert excinfo.value.message == "Password must be exactly 8 digits (numbers only)."

    def test_arabic_indic_pin_rejected(self, student_body):
        student_body["password"] = "١٢٣٤٥٦٧٨"
        with pytest.raises(ValidationError):
            validate_student_request(student_body)


class TestMemberUpdate:
    def test_present_fields_only(self):
        fields = validate_member_update({"full_name": " <Ed> ", "is_active": False})
        assert fields == {"full_name": "Ed", "is_active": False}

    def test_email_normalised(self):
        assert validate_member_update({"email": " Ed@Example.COM"}) == {"email": "ed@example.com"}

    def test_every_violation_listed(self):
        with pytest.raises(ValidationError) as excinfo:
            validate_member_update({"full_name": "", "email": "nope", "is_active": "yes"})
        assert excinfo.value.errors == [
            "Full name is required.",
            "Invalid email format.",
            "is_active must be true or false.",
        ]

    def test_nothing_to_update(self):
        with pytest.raises(ValidationError) as excinfo:
            validate_member_update({"unknown": 1})
        assert excinfo.value.errors == ["No fields to update."]


class TestStudentUpdate:
    def test_blank_optional_becomes_none(self):
        fields = validate_student_update({"guardian": "  ", "grade": "Year 11"})
        assert fields == {"guardian": None, "grade": "Year 11"}

    def test_status_and_enrollment_type(self):
        fields = validate_student_update({"status": "passed", "enrollment_type": "visitor"})
        assert fields == {"status": "passed", "enrollment_type": "visitor"}

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError) as excinfo:
            validate_student_update({"status": "graduated"})
        assert excinfo.value.errors == [
            "Status must be one of: active, cancelled, archived, passed."
        ]

    def test_name_cannot_be_cleared(self):
        with pytest.raises(ValidationError):
            validate_student_update({"name": "   "})
