from __future__ import annotations

from flask import Flask, jsonify, request

from ..container import Container
from ..core.exceptions import ValidationError
from .model import Account, Member, RegistrationInput


def _pick(payload: dict, *keys: str):
    for key in keys:
        value = payload.get(key)
        if value is not None:
            return value
    return None


def registration_input_from_json(payload: dict) -> RegistrationInput:
    """Accept both the web client's camelCase names and snake_case ones."""
    class_number = _pick(payload, "classNumber", "class_number")
    return RegistrationInput(
        email=_pick(payload, "email"),
        phone=_pick(payload, "phone"),
        password=_pick(payload, "password") or "",
        first_name=_pick(payload, "firstName", "first_name") or "",
        last_name=_pick(payload, "lastName", "last_name") or "",
        middle_name=_pick(payload, "middleName", "middle_name"),
        nickname=_pick(payload, "nickname"),
        suffix=_pick(payload, "suffix"),
        location=_pick(payload, "city", "location") or "",
        program=_pick(payload, "encounterType", "program") or "",
        class_number="" if class_number is None else str(class_number),
    )


def account_json(account: Account) -> dict:
    return {
        "id": account.account_id,
        "email": account.email,
        "phone": account.phone,
        "role": account.role.value,
        "isActive": account.is_active,
    }


def member_json(member: Member) -> dict:
    return {
        "id": member.member_id,
        "communityId": member.community_id,
        "firstName": member.first_name,
        "lastName": member.last_name,
        "middleName": member.middle_name,
        "nickname": member.nickname,
        "suffix": member.suffix,
        "city": member.location_code,
        "encounterType": member.program_code,
        "classNumber": member.class_number,
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/register", methods=["POST"], endpoint="register_member")
    def register_member():
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be a JSON object")

        result = container.registrar.register(registration_input_from_json(payload))
        return jsonify({"user": account_json(result.account), "member": member_json(result.member)}), 201

    @app.route("/api/members/<community_id>", methods=["GET"], endpoint="get_member")
    def get_member(community_id: str):
        profile = container.member_lookup.find_by_community_id(community_id)
        return jsonify({"user": account_json(profile.account), "member": member_json(profile.member)})

    @app.route("/api/members/<community_id>/deactivate", methods=["POST"], endpoint="deactivate_member")
    def deactivate_member(community_id: str):
        container.member_lookup.deactivate(community_id)
        return jsonify({"communityId": community_id.strip().upper(), "isActive": False})
