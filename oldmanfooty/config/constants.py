"""Static field catalogues and reference data for carnivals.

Merge, sync and submission behaviour is driven by these explicit lists
rather than by inspecting the ORM mapping at runtime.
"""

AUSTRALIAN_STATES = ('ACT', 'NSW', 'NT', 'QLD', 'SA', 'TAS', 'VIC', 'WA')

# Merge categories
TEXT = 'text'
DATE = 'date'
NUMERIC = 'numeric'
BOOLEAN = 'boolean'

# Fields that carry no identity or ownership meaning
DESCRIPTIVE_FIELDS = (
    'end_date',
    'state',
    'venue_name',
    'location_address',
    'location_address_line1',
    'location_address_line2',
    'location_suburb',
    'location_postcode',
    'location_country',
    'location_latitude',
    'location_longitude',
    'google_maps_url',
    'organiser_contact_name',
    'organiser_contact_email',
    'organiser_contact_phone',
    'schedule_details',
    'registration_link',
    'fees_description',
    'call_for_volunteers',
    'club_logo_url',
    'promotional_image_url',
    'draw_file_url',
    'draw_file_name',
    'draw_title',
    'draw_description',
    'social_media_facebook',
    'social_media_instagram',
    'social_media_twitter',
    'social_media_website',
    'max_teams',
    'is_registration_open',
    'registration_deadline',
)

# What a user submission may set. Ownership and external identity fields are
# never taken from a submission, nor are admin notes.
USER_EDITABLE_FIELDS = ('title', 'date') + DESCRIPTIVE_FIELDS

# External identity fields, only ever written by the sync or an admin merge
EXTERNAL_IDENTITY_FIELDS = (
    'external_id',
    'external_title',
    'external_address',
    'external_date',
)

# Fields the sync copies onto an existing carnival, and only when empty there
SYNCABLE_FIELDS = EXTERNAL_IDENTITY_FIELDS + (
    'end_date',
    'state',
    'venue_name',
    'location_address',
    'location_address_line1',
    'location_address_line2',
    'location_suburb',
    'location_postcode',
    'location_country',
    'location_latitude',
    'location_longitude',
    'google_maps_url',
    'organiser_contact_name',
    'organiser_contact_email',
    'organiser_contact_phone',
    'schedule_details',
    'registration_link',
    'fees_description',
    'club_logo_url',
    'social_media_facebook',
    'social_media_website',
)

# Everything the sync may set when it creates a carnival
EXTERNAL_CREATE_FIELDS = ('title', 'date', 'is_active') + SYNCABLE_FIELDS

# Admin merge precedence, by category. Ownership, lifecycle and external
# identity fields are handled separately.
MERGEABLE_FIELDS = {
    'title': TEXT,
    'state': TEXT,
    'venue_name': TEXT,
    'location_address': TEXT,
    'location_address_line1': TEXT,
    'location_address_line2': TEXT,
    'location_suburb': TEXT,
    'location_postcode': TEXT,
    'location_country': TEXT,
    'google_maps_url': TEXT,
    'organiser_contact_name': TEXT,
    'organiser_contact_email': TEXT,
    'organiser_contact_phone': TEXT,
    'original_external_contact_email': TEXT,
    'schedule_details': TEXT,
    'registration_link': TEXT,
    'fees_description': TEXT,
    'call_for_volunteers': TEXT,
    'club_logo_url': TEXT,
    'promotional_image_url': TEXT,
    'draw_file_url': TEXT,
    'draw_file_name': TEXT,
    'draw_title': TEXT,
    'draw_description': TEXT,
    'social_media_facebook': TEXT,
    'social_media_instagram': TEXT,
    'social_media_twitter': TEXT,
    'social_media_website': TEXT,
    'date': DATE,
    'end_date': DATE,
    'registration_deadline': DATE,
    'location_latitude': NUMERIC,
    'location_longitude': NUMERIC,
    'max_teams': NUMERIC,
    'is_registration_open': BOOLEAN,
}
