from ..errors import ValidationError
from .records import Record, positive_int, require_fields, utc_now

MATERIAL_TYPES = ('document', 'video', 'link', 'image')
ASSIGNMENT_STATUSES = ('draft', 'published')


class Material(Record):
    FIELDS = {
        'title': '',
        'type': 'document',
        'url': '',
        'description': '',
    }

    def validate(self):
        require_fields(self.to_dict(), ['title'])
        if self.type not in MATERIAL_TYPES:
            raise ValidationError(f'Material type must be one of: {", ".join(MATERIAL_TYPES)}.')


class Assignment(Record):
    FIELDS = {
        'lesson_id': None,
        'title': '',
        'description': '',
        'instructions': '',
        'due_date': None,
        'max_points': 100,
        'status': 'draft',
    }

    @property
    def is_published(self):
        return self.status == 'published'

    def validate(self):
        require_fields(self.to_dict(), ['title'])
        if self.status not in ASSIGNMENT_STATUSES:
            raise ValidationError(f'Assignment status must be one of: {", ".join(ASSIGNMENT_STATUSES)}.')
        self.max_points = positive_int(self.max_points, 'Max points')


class Lesson(Record):
    """A lesson owned by one course, with nested materials and assignments"""
    FIELDS = {
        'course_id': None,
        'title': '',
        'description': '',
        'content': '',
        'duration': 0,
        'order': 0,
        'is_published': False,
        'materials': [],
        'assignments': [],
        'created_at': None,
        'updated_at': None,
    }

    @classmethod
    def from_dict(cls, data, origin=None):
        lesson = super().from_dict(data, origin=origin)
        lesson.materials = [m if isinstance(m, Material) else Material.from_dict(m)
                            for m in lesson.materials or []]
        lesson.assignments = [a if isinstance(a, Assignment) else Assignment.from_dict(a)
                              for a in lesson.assignments or []]
        for assignment in lesson.assignments:
            assignment.lesson_id = lesson.id
        return lesson

    @classmethod
    def create(cls, course_id, data, order):
        data = dict(data)
        data.pop('id', None)
        data['course_id'] = course_id
        data.setdefault('order', order)
        lesson = cls.from_dict(data)
        lesson.created_at = lesson.updated_at = utc_now()
        lesson.validate()
        return lesson

    def to_dict(self):
        data = super().to_dict()
        data['materials'] = [m.to_dict() for m in self.materials]
        data['assignments'] = [a.to_dict() for a in self.assignments]
        return data

    def apply_changes(self, changes):
        changes = dict(changes)
        changes.pop('course_id', None)
        materials = changes.pop('materials', None)
        assignments = changes.pop('assignments', None)
        self.update(changes)
        if materials is not None:
            self.materials = [Material.from_dict(m) for m in materials]
        if assignments is not None:
            self.assignments = [Assignment.from_dict(a) for a in assignments]
            for assignment in self.assignments:
                assignment.lesson_id = self.id
        self.validate()
        self.updated_at = utc_now()
        return self

    def validate(self):
        require_fields(self.to_dict(), ['title'])
        try:
            self.duration = int(self.duration or 0)
            self.order = int(self.order or 0)
        except (TypeError, ValueError):
            raise ValidationError('Duration and order must be whole numbers.')
        if self.duration < 0:
            raise ValidationError('Duration cannot be negative.')
        self.is_published = bool(self.is_published)
        for material in self.materials:
            material.validate()
        for assignment in self.assignments:
            assignment.validate()

    def published_assignments(self):
        return [a for a in self.assignments if a.is_published]

    def find_assignment(self, assignment_id):
        for assignment in self.assignments:
            if assignment.id == assignment_id:
                return assignment
        return None

    def student_dict(self):
        """Lesson as a student sees it: drafts are never exposed"""
        data = self.to_dict()
        data['assignments'] = [a.to_dict() for a in self.published_assignments()]
        return data


def published_lessons(lessons):
    """Published lessons in display order"""
    return sorted((lesson for lesson in lessons if lesson.is_published),
                  key=lambda lesson: lesson.order)
