from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from .models import ClassSection, Staff, Student, Users


class StudentSerializer(serializers.ModelSerializer):
    """Serializes a student directory entry"""

    department = serializers.StringRelatedField()

    class Meta:
        model = Student
        fields = ("registration_number", "name", "email", "department", "section")


class StaffSerializer(serializers.ModelSerializer):
    """Serializes a staff directory entry"""

    department = serializers.StringRelatedField()

    class Meta:
        model = Staff
        fields = ("id", "name", "email", "designation", "department", "section")


class ClassSectionSerializer(serializers.ModelSerializer):
    department = serializers.StringRelatedField()

    class Meta:
        model = ClassSection
        fields = ("id", "department", "section")


class AccountActivationSerializer(serializers.Serializer):
    """Takes a directory email and a password to create the login for that person"""

    email = serializers.EmailField()
    password = serializers.CharField(max_length=128, write_only=True)

    def validate_email(self, value):
        """Checks that the email belongs to a student or staff member and has no login yet.

        Args:
            value (string): email string

        Raises:
            serializers.ValidationError: raises if email is unknown or already activated

        Returns:
            value: normalized email
        """
        value = value.strip()
        known = (
            Staff.objects.filter(email__iexact=value).exists()
            or Student.objects.filter(email__iexact=value).exists()
        )
        if not known:
            raise serializers.ValidationError("Email not found")
        if Users.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("Account already activated")
        return value.lower()

    def validate_password(self, value):
        validate_password(value)
        return value

    def create(self, validated_data):
        """Creates the login and stores a salted hash of the password.

        Args:
            validated_data (dictionary): email and password

        Returns:
            Object: user object
        """
        user = Users(
            username=validated_data["email"],
            email=validated_data["email"],
        )
        user.set_password(validated_data["password"])
        user.save()
        return user


class LoginSerializer(TokenObtainPairSerializer):
    """Issues a token pair for an email typed in any casing.

    Logins are stored with lowercased emails, so the email is lowercased
    before the credentials are checked.
    """

    def validate(self, attrs):
        attrs[self.username_field] = attrs[self.username_field].strip().lower()
        return super().validate(attrs)
