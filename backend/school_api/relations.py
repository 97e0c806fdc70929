"""Populate vocabulary for each entity.

Aliases are resolved once here so request handling only does dictionary
lookups. Student and teacher reach each other through their courses.
"""

from .utils.query_plan import RelationNode, RelationSchema

STUDENT_RELATIONS = RelationSchema(
    aliases={'course': 'courses', 'courses': 'courses', 'teacher': 'teacher'},
    tree=(RelationNode('courses', (RelationNode('teacher'),)),),
)

TEACHER_RELATIONS = RelationSchema(
    aliases={'course': 'courses', 'courses': 'courses', 'student': 'students', 'students': 'students'},
    tree=(RelationNode('courses', (RelationNode('students'),)),),
)

COURSE_RELATIONS = RelationSchema(
    aliases={'teacher': 'teacher', 'student': 'students', 'students': 'students'},
    tree=(RelationNode('teacher'), RelationNode('students')),
)
