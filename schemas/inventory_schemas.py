from marshmallow import Schema, fields, validate, EXCLUDE


class StockEntrySchema(Schema):
    class Meta:
        unknown = EXCLUDE

    product_id = fields.Integer(required=True, strict=True)
    quantity = fields.Integer(required=True, strict=True)


class StockExitSchema(StockEntrySchema):
    reference = fields.Str(allow_none=True, validate=validate.Length(max=255))


class AdjustInventorySchema(Schema):
    class Meta:
        unknown = EXCLUDE

    current_quantity = fields.Integer(required=True, strict=True)
