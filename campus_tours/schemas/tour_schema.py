from marshmallow import EXCLUDE, fields, post_load, validate, validates_schema, ValidationError
from campus_tours import ma
from campus_tours.models.tour import Tour
from campus_tours.utils.datetime_utils import to_naive_utc


STATUS_OVERRIDE_CHOICES = ['available', 'filling-fast', 'none']


class TourSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = Tour
        load_instance = False
        unknown = EXCLUDE
        exclude = ('created_at', 'updated_at')

    name = fields.Str(required=True, validate=validate.Length(min=1, max=150),
                      error_messages={'required': 'name is required'})
    start_time = fields.DateTime(required=True, data_key='startTime',
                                 error_messages={'required': 'startTime is required'})
    end_time = fields.DateTime(required=True, data_key='endTime',
                               error_messages={'required': 'endTime is required'})
    capacity = fields.Int(
        required=True,
        validate=validate.Range(min=1, error='capacity must be a positive integer'),
        error_messages={'required': 'capacity is required',
                        'invalid': 'capacity must be a positive integer'})

    # Read-only
    id = fields.Str(dump_only=True)
    registered = fields.Int(dump_only=True)
    checked_in = fields.Int(dump_only=True, data_key='checkedIn')
    remaining = fields.Int(dump_only=True)
    paused = fields.Bool(dump_only=True)
    canceled = fields.Bool(dump_only=True)
    status_override = fields.Str(dump_only=True, data_key='statusOverride')
    # Attached by tour_service.annotate() before dumping
    status = fields.Str(dump_only=True)

    @validates_schema
    def validate_schedule(self, data, **kwargs):
        start = data.get('start_time')
        end = data.get('end_time')
        if start and end and to_naive_utc(end) < to_naive_utc(start):
            raise ValidationError('endTime must not be before startTime', 'endTime')

    @post_load
    def normalise_times(self, data, **kwargs):
        for key in ('start_time', 'end_time'):
            if key in data:
                data[key] = to_naive_utc(data[key])
        return data


class TourUpdateSchema(ma.Schema):
    """Partial tour update; every field optional, null means unchanged."""

    class Meta:
        unknown = EXCLUDE

    name = fields.Str(allow_none=True, validate=validate.Length(min=1, max=150))
    start_time = fields.DateTime(allow_none=True, data_key='startTime')
    end_time = fields.DateTime(allow_none=True, data_key='endTime')
    capacity = fields.Int(
        allow_none=True,
        validate=validate.Range(min=1, error='capacity must be a positive integer'),
        error_messages={'invalid': 'capacity must be a positive integer'})
    paused = fields.Bool(allow_none=True)
    canceled = fields.Bool(allow_none=True)
    status_override = fields.Str(
        allow_none=True, data_key='statusOverride',
        validate=validate.OneOf(
            STATUS_OVERRIDE_CHOICES,
            error='statusOverride must be one of available, filling-fast, none'))

    @post_load
    def normalise_times(self, data, **kwargs):
        for key in ('start_time', 'end_time'):
            if data.get(key) is not None:
                data[key] = to_naive_utc(data[key])
        return data


class CapacityOverrideSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    capacity = fields.Int(
        required=True,
        validate=validate.Range(min=1, error='capacity must be a positive integer'),
        error_messages={'required': 'capacity must be a positive integer',
                        'null': 'capacity must be a positive integer',
                        'invalid': 'capacity must be a positive integer'})


tour_schema = TourSchema()
tours_schema = TourSchema(many=True)
tour_update_schema = TourUpdateSchema()
capacity_override_schema = CapacityOverrideSchema()
