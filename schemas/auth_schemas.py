from marshmallow import Schema, fields, validate, EXCLUDE


class RegisterCustomerSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    username = fields.Str(required=True, validate=validate.Length(min=1, max=80))
    password = fields.Str(required=True, load_only=True)
    full_name = fields.Str(allow_none=True, validate=validate.Length(max=150))
    email = fields.Email(allow_none=True)


class LoginSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    username = fields.Str(required=True)
    password = fields.Str(required=True, load_only=True)
