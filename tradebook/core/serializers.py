from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from .models import User, CompanySettings, Currency, AuditLog
from .permissions import PERMISSION_KEYS, permission_map


def validate_feature_keys(value):
    unknown = sorted(set(value or []) - set(PERMISSION_KEYS))
    if unknown:
        raise serializers.ValidationError(f"Unknown permission keys: {', '.join(unknown)}")
    return sorted(set(value or []))


class UserSerializer(serializers.ModelSerializer):
    permissions = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'first_name', 'last_name', 'phone', 'role',
                  'feature_permissions', 'permissions', 'other_details', 'notes',
                  'is_active', 'is_superuser', 'last_login', 'created_at', 'updated_at']
        read_only_fields = ['role', 'feature_permissions', 'is_superuser', 'last_login', 'created_at', 'updated_at']

    def get_permissions(self, obj):
        return permission_map(obj)


class StaffCreateSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, validators=[validate_password])
    password_confirm = serializers.CharField(write_only=True)
    feature_permissions = serializers.ListField(child=serializers.CharField(), required=False, validators=[validate_feature_keys])

    class Meta:
        model = User
        fields = ['username', 'email', 'password', 'password_confirm', 'first_name', 'last_name',
                  'phone', 'feature_permissions', 'other_details', 'notes']

    def validate_email(self, value):
        if value and User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("A user with this email already exists.")
        return value

    def validate(self, attrs):
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({"password": "Passwords don't match"})
        return attrs

    def create(self, validated_data):
        validated_data.pop('password_confirm')
        password = validated_data.pop('password')
        validated_data['feature_permissions'] = validate_feature_keys(validated_data.get('feature_permissions'))
        user = User.objects.create(**validated_data, role=User.ROLE_STAFF, is_active=True)
        user.set_password(password)
        user.save()
        return user


class StaffUpdateSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, required=False, allow_blank=True)

    class Meta:
        model = User
        fields = ['email', 'first_name', 'last_name', 'phone', 'other_details', 'notes', 'is_active', 'password']

    def update(self, instance, validated_data):
        password = validated_data.pop('password', None)
        instance = super().update(instance, validated_data)
        if password:
            validate_password(password, instance)
            instance.set_password(password)
            instance.save(update_fields=['password'])
        return instance


class StaffPermissionsSerializer(serializers.Serializer):
    feature_permissions = serializers.ListField(child=serializers.CharField(), allow_empty=True, validators=[validate_feature_keys])


class CompanySettingsSerializer(serializers.ModelSerializer):
    class Meta:
        model = CompanySettings
        exclude = ['id']
        read_only_fields = ['updated_at']

    def validate(self, attrs):
        for kind, (prefix_field, number_field) in CompanySettings.DOCUMENT_KINDS.items():
            prefix = attrs.get(prefix_field)
            if prefix is not None and not prefix.strip():
                raise serializers.ValidationError({prefix_field: "Prefix cannot be empty."})
            number = attrs.get(number_field)
            if number is not None and number < 1:
                raise serializers.ValidationError({number_field: "Next number must be at least 1."})
        return attrs


class CurrencySerializer(serializers.ModelSerializer):
    class Meta:
        model = Currency
        fields = ['id', 'code', 'name', 'symbol', 'is_default', 'created_at']
        read_only_fields = ['created_at']

    def validate_code(self, value):
        return value.strip().upper()


class AuditLogSerializer(serializers.ModelSerializer):
    username = serializers.CharField(source='user.username', read_only=True, default=None)

    class Meta:
        model = AuditLog
        fields = ['id', 'user', 'username', 'action', 'model_name', 'object_id', 'object_name',
                  'object_reference', 'changes', 'ip_address', 'created_at']
