"""
Serializers for authentication models.

UserSummarySerializer is the compact representation embedded in chat
payloads when a user reference is expanded (channel owner, members,
message sender).
"""

from rest_framework import serializers

from authentication.models import User


class UserSummarySerializer(serializers.ModelSerializer):
    """
    Compact user representation.

    Output:
        {"id": 1, "name": {"first": "Ada", "last": "Lovelace"}}
    """

    name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ["id", "name"]
        read_only_fields = fields

    def get_name(self, obj):
        profile = getattr(obj, "profile", None)
        return {
            "first": profile.first_name if profile else "",
            "last": profile.last_name if profile else "",
        }
