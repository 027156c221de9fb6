from marshmallow import Schema, fields, validate, EXCLUDE, missing

from models.enums import Season


class CreateProductSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    name = fields.Str(required=True, validate=validate.Length(min=1, max=150))
    description = fields.Str(allow_none=True)
    price = fields.Decimal(required=True, places=2, validate=validate.Range(min=0))
    stock = fields.Integer(required=True, strict=True, validate=validate.Range(min=0))
    category_id = fields.Integer(allow_none=True)
    season = fields.Enum(Season, by_value=True, load_default=Season.REGULAR)
    image_url = fields.Str(allow_none=True, validate=validate.Length(max=255))


class UpdateProductSchema(CreateProductSchema):
    active = fields.Boolean()

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        for field_obj in self.fields.values():
            field_obj.required = False
        # Only fields present in the request body may be updated
        self.fields['season'].load_default = missing


class ProductFilterSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    season = fields.List(fields.Enum(Season, by_value=True))
    category = fields.Integer()
    active = fields.Boolean()


class CreateCategorySchema(Schema):
    class Meta:
        unknown = EXCLUDE

    name = fields.Str(required=True, validate=validate.Length(min=1, max=100))
    description = fields.Str(allow_none=True)
