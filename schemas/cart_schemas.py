from marshmallow import Schema, fields, validate, EXCLUDE


class AddToCartSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    product_id = fields.Integer(required=True, strict=True)
    quantity = fields.Integer(required=True, strict=True)


class UpdateCartItemSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    quantity = fields.Integer(required=True, strict=True)


class CheckoutSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    address = fields.Str(required=True, validate=validate.Length(min=1))
    city = fields.Str(required=True, validate=validate.Length(min=1))
    postal_code = fields.Str(required=True, validate=validate.Length(min=1))
    payment_method = fields.Str(required=True, validate=validate.Length(min=1))
    notes = fields.Str(allow_none=True)
