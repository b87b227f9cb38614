from marshmallow import EXCLUDE, fields, post_load, validate
from campus_tours import ma


class SettingsSchema(ma.Schema):
    """Dumps a TourSettings snapshot."""

    max_tours_per_student = fields.Int(data_key='maxToursPerStudent')
    # Older admin screens read the knob under this name
    max_tickets_per_student = fields.Function(
        lambda s: s.max_tours_per_student, data_key='maxTicketsPerStudent')
    filling_fast_threshold = fields.Float(data_key='fillingFastThreshold')
    announcement = fields.Str()


class SettingsUpdateSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    max_tours_per_student = fields.Int(
        allow_none=True, data_key='maxToursPerStudent',
        validate=validate.Range(min=1, error='maxToursPerStudent must be a positive integer'),
        error_messages={'invalid': 'maxToursPerStudent must be a positive integer'})
    max_tickets_per_student = fields.Int(
        allow_none=True, data_key='maxTicketsPerStudent',
        validate=validate.Range(min=1, error='maxTicketsPerStudent must be a positive integer'),
        error_messages={'invalid': 'maxTicketsPerStudent must be a positive integer'})
    filling_fast_threshold = fields.Float(
        allow_none=True, data_key='fillingFastThreshold',
        validate=validate.Range(
            min=0, max=1, min_inclusive=False,
            error='fillingFastThreshold must be a number between 0 and 1'),
        error_messages={'invalid': 'fillingFastThreshold must be a number between 0 and 1'})
    announcement = fields.Str(allow_none=True)

    @post_load
    def merge_alias(self, data, **kwargs):
        alias = data.pop('max_tickets_per_student', None)
        if data.get('max_tours_per_student') is None and alias is not None:
            data['max_tours_per_student'] = alias
        return data


settings_schema = SettingsSchema()
settings_update_schema = SettingsUpdateSchema()
