# portal/models/content.py
from datetime import date, datetime, time, timezone
from portal import db


def _utcnow():
    return datetime.now(timezone.utc)


class SerializerMixin:
    """Column-by-column ``to_dict`` with ISO-8601 dates and times."""

    def to_dict(self):
        data = {}
        for column in self.__table__.columns:
            value = getattr(self, column.name)
            if isinstance(value, (datetime, date, time)):
                value = value.isoformat()
            data[column.name] = value
        return data


class CategoryMixin(SerializerMixin):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), unique=True, nullable=False)
    display_name = db.Column(db.String(120), nullable=False)
    icon = db.Column(db.String(64))
    color = db.Column(db.String(16), default='#6B7280')
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=_utcnow)


# ---------------------------------------------------------------------------
# Business directory
# ---------------------------------------------------------------------------

class BusinessCategory(CategoryMixin, db.Model):
    __tablename__ = 'business_categories'

    display_name_en = db.Column(db.String(120))
    description = db.Column(db.Text)


class Business(SerializerMixin, db.Model):
    __tablename__ = 'businesses'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    category_id = db.Column(db.Integer, db.ForeignKey('business_categories.id'), index=True)
    description = db.Column(db.Text)
    description_en = db.Column(db.Text)
    street = db.Column(db.String(200))
    house_number = db.Column(db.String(20))
    postal_code = db.Column(db.String(10))
    city = db.Column(db.String(100))
    location = db.Column(db.String(100), index=True)
    phone = db.Column(db.String(50))
    email = db.Column(db.String(200))
    website = db.Column(db.String(500))
    opening_hours = db.Column(db.JSON)
    opening_hours_text = db.Column(db.Text)
    tags = db.Column(db.JSON)
    images = db.Column(db.JSON)
    logo_url = db.Column(db.String(500))
    latitude = db.Column(db.Float)
    longitude = db.Column(db.Float)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    is_verified = db.Column(db.Boolean, nullable=False, default=False)
    is_featured = db.Column(db.Boolean, nullable=False, default=False)
    is_recommended = db.Column(db.Boolean, nullable=False, default=False)
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, nullable=False, default=_utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)

    category = db.relationship('BusinessCategory', lazy='joined')

    def to_dict(self):
        data = super().to_dict()
        cat = self.category
        data['category_name'] = cat.name if cat else None
        data['category_display_name'] = cat.display_name if cat else None
        data['category_icon'] = cat.icon if cat else None
        data['category_color'] = cat.color if cat else None
        return data


class Event(SerializerMixin, db.Model):
    __tablename__ = 'events'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    description_en = db.Column(db.Text)
    start_date = db.Column(db.Date, nullable=False, index=True)
    start_time = db.Column(db.Time)
    end_date = db.Column(db.Date)
    end_time = db.Column(db.Time)
    is_all_day = db.Column(db.Boolean, nullable=False, default=False)
    location_name = db.Column(db.String(200))
    location_address = db.Column(db.String(300))
    latitude = db.Column(db.Float)
    longitude = db.Column(db.Float)
    category = db.Column(db.String(64), nullable=False, default='general', index=True)
    organizer_name = db.Column(db.String(200))
    contact_email = db.Column(db.String(200))
    contact_phone = db.Column(db.String(50))
    website = db.Column(db.String(500))
    image_url = db.Column(db.String(500))
    images = db.Column(db.JSON)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    is_featured = db.Column(db.Boolean, nullable=False, default=False)
    is_recurring = db.Column(db.Boolean, nullable=False, default=False)
    recurrence_rule = db.Column(db.String(200))
    requires_registration = db.Column(db.Boolean, nullable=False, default=False)
    max_participants = db.Column(db.Integer)
    registration_url = db.Column(db.String(500))
    created_at = db.Column(db.DateTime, nullable=False, default=_utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)


# ---------------------------------------------------------------------------
# Community boards
# ---------------------------------------------------------------------------

class ForumCategory(CategoryMixin, db.Model):
    __tablename__ = 'forum_categories'

    description = db.Column(db.Text)
    posts_count = db.Column(db.Integer, nullable=False, default=0)


class ForumPost(SerializerMixin, db.Model):
    __tablename__ = 'forum_posts'

    id = db.Column(db.Integer, primary_key=True)
    category_id = db.Column(db.Integer, db.ForeignKey('forum_categories.id'), index=True)
    parent_id = db.Column(db.Integer, db.ForeignKey('forum_posts.id'), index=True)
    author_name = db.Column(db.String(120), nullable=False)
    title = db.Column(db.String(200), nullable=False)
    content = db.Column(db.Text, nullable=False)
    is_pinned = db.Column(db.Boolean, nullable=False, default=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    is_approved = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=_utcnow)

    category = db.relationship('ForumCategory', lazy='joined')
    replies = db.relationship('ForumPost', backref=db.backref('parent', remote_side=[id]), lazy='dynamic')

    def to_dict(self):
        data = super().to_dict()
        data['forum_categories'] = self.category.to_dict() if self.category else None
        return data


class BulletinCategory(CategoryMixin, db.Model):
    __tablename__ = 'bulletin_categories'


class BulletinPost(SerializerMixin, db.Model):
    __tablename__ = 'bulletin_posts'

    id = db.Column(db.Integer, primary_key=True)
    category_id = db.Column(db.Integer, db.ForeignKey('bulletin_categories.id'), index=True)
    author_name = db.Column(db.String(120), nullable=False)
    author_email = db.Column(db.String(200))
    author_phone = db.Column(db.String(50))
    title = db.Column(db.String(200), nullable=False)
    content = db.Column(db.Text, nullable=False)
    is_lending = db.Column(db.Boolean, nullable=False, default=False)
    lending_duration = db.Column(db.String(100))
    location = db.Column(db.String(100))
    show_contact = db.Column(db.Boolean, nullable=False, default=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=_utcnow)

    category = db.relationship('BulletinCategory', lazy='joined')

    def to_dict(self):
        data = super().to_dict()
        data['bulletin_categories'] = self.category.to_dict() if self.category else None
        return data


class PetAlert(SerializerMixin, db.Model):
    __tablename__ = 'pet_alerts'

    id = db.Column(db.Integer, primary_key=True)
    alert_type = db.Column(db.String(32), nullable=False, index=True)
    pet_type = db.Column(db.String(32), nullable=False, index=True)
    pet_name = db.Column(db.String(100))
    pet_breed = db.Column(db.String(100))
    pet_color = db.Column(db.String(100))
    pet_size = db.Column(db.String(32))
    pet_distinctive_features = db.Column(db.Text)
    description = db.Column(db.Text, nullable=False)
    last_seen_location = db.Column(db.String(300))
    last_seen_date = db.Column(db.String(32))
    contact_name = db.Column(db.String(120), nullable=False)
    contact_phone = db.Column(db.String(50))
    contact_email = db.Column(db.String(200))
    is_urgent = db.Column(db.Boolean, nullable=False, default=False)
    status = db.Column(db.String(32), nullable=False, default='active')
    created_at = db.Column(db.DateTime, nullable=False, default=_utcnow)


class CleanlinessReportType(CategoryMixin, db.Model):
    __tablename__ = 'cleanliness_report_types'


class CleanlinessReport(SerializerMixin, db.Model):
    __tablename__ = 'cleanliness_reports'

    id = db.Column(db.Integer, primary_key=True)
    report_type = db.Column(db.String(64), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False)
    location_description = db.Column(db.String(300), nullable=False)
    street = db.Column(db.String(200))
    reporter_name = db.Column(db.String(120))
    reporter_email = db.Column(db.String(200))
    reporter_phone = db.Column(db.String(50))
    anonymous = db.Column(db.Boolean, nullable=False, default=False)
    status = db.Column(db.String(32), nullable=False, default='new', index=True)
    priority = db.Column(db.String(32), nullable=False, default='normal')
    created_at = db.Column(db.DateTime, nullable=False, default=_utcnow)


class Factcheck(SerializerMixin, db.Model):
    __tablename__ = 'factchecks'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    claim = db.Column(db.Text, nullable=False)
    verdict = db.Column(db.String(32), nullable=False, index=True)
    explanation = db.Column(db.Text)
    category = db.Column(db.String(64), index=True)
    sources = db.Column(db.JSON)
    is_published = db.Column(db.Boolean, nullable=False, default=False)
    published_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, nullable=False, default=_utcnow)


# ---------------------------------------------------------------------------
# Traffic lights on the dashboard
# ---------------------------------------------------------------------------

class TrafficLocation(SerializerMixin, db.Model):
    __tablename__ = 'traffic_locations'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    name_short = db.Column(db.String(64))
    location_type = db.Column(db.String(32))
    show_on_dashboard = db.Column(db.Boolean, nullable=False, default=True)
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=_utcnow)

    statuses = db.relationship('TrafficStatus', backref='location', lazy='dynamic')

    def current_status(self):
        return self.statuses.order_by(TrafficStatus.created_at.desc(), TrafficStatus.id.desc()).first()


class TrafficStatus(SerializerMixin, db.Model):
    __tablename__ = 'traffic_statuses'

    id = db.Column(db.Integer, primary_key=True)
    location_id = db.Column(db.Integer, db.ForeignKey('traffic_locations.id'), nullable=False, index=True)
    status = db.Column(db.String(32), nullable=False, default='open')
    status_level = db.Column(db.String(16), nullable=False, default='green')
    message = db.Column(db.Text)
    valid_until = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, nullable=False, default=_utcnow)
