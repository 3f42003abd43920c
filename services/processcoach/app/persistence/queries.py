"""GraphQL documents for the plays, play_steps and roles collections."""
from __future__ import annotations

PLAY_FIELDS = """
            play_id
            play_name
            client_id
"""

STEP_FIELDS = """
            id
            play_id
            client_id
            step_name
            step_description
            step_num
            step_role_name
"""

ROLE_FIELDS = """
            role_name
            role_description
            client_id
"""

LIST_PLAYS = f"""
query GetPlays($client_id: String!) {{
  playsCollection(
    filter: {{ client_id: {{ eq: $client_id }} }}
    orderBy: [{{ play_name: AscNullsLast }}]
  ) {{
    edges {{
      node {{{PLAY_FIELDS}      }}
    }}
  }}
}}
"""

GET_PLAY = f"""
query GetPlay($play_id: UUID!, $client_id: String!) {{
  playsCollection(
    filter: {{ play_id: {{ eq: $play_id }}, client_id: {{ eq: $client_id }} }}
    first: 1
  ) {{
    edges {{
      node {{{PLAY_FIELDS}      }}
    }}
  }}
}}
"""

CREATE_PLAY = f"""
mutation CreatePlay($play_name: String!, $client_id: String!) {{
  insertIntoplaysCollection(
    objects: [{{ play_name: $play_name, client_id: $client_id }}]
  ) {{
    records {{{PLAY_FIELDS}    }}
  }}
}}
"""

UPDATE_PLAY = f"""
mutation UpdatePlay($play_id: UUID!, $play_name: String!, $client_id: String!) {{
  updateplaysCollection(
    filter: {{ play_id: {{ eq: $play_id }}, client_id: {{ eq: $client_id }} }}
    set: {{ play_name: $play_name }}
  ) {{
    records {{{PLAY_FIELDS}    }}
  }}
}}
"""

DELETE_PLAY = """
mutation DeletePlay($play_id: UUID!, $client_id: String!) {
  deleteFromplaysCollection(
    filter: { play_id: { eq: $play_id }, client_id: { eq: $client_id } }
  ) {
    affectedCount
  }
}
"""

LIST_PLAY_STEPS = f"""
query GetPlaySteps($play_id: UUID!, $client_id: String!) {{
  play_stepsCollection(
    filter: {{ play_id: {{ eq: $play_id }}, client_id: {{ eq: $client_id }} }}
    orderBy: [{{ step_num: AscNullsLast }}]
  ) {{
    edges {{
      node {{{STEP_FIELDS}      }}
    }}
  }}
}}
"""

CREATE_PLAY_STEP = f"""
mutation CreatePlayStep(
  $play_id: UUID!
  $client_id: String!
  $step_name: String!
  $step_description: String
  $step_num: Int!
  $step_role_name: String
) {{
  insertIntoplay_stepsCollection(
    objects: [
      {{
        play_id: $play_id
        client_id: $client_id
        step_name: $step_name
        step_description: $step_description
        step_num: $step_num
        step_role_name: $step_role_name
      }}
    ]
  ) {{
    records {{{STEP_FIELDS}    }}
  }}
}}
"""

UPDATE_PLAY_STEP = f"""
mutation UpdatePlayStep(
  $id: UUID!
  $client_id: String!
  $step_name: String!
  $step_description: String
  $step_num: Int!
  $step_role_name: String
) {{
  updateplay_stepsCollection(
    filter: {{ id: {{ eq: $id }}, client_id: {{ eq: $client_id }} }}
    set: {{
      step_name: $step_name
      step_description: $step_description
      step_num: $step_num
      step_role_name: $step_role_name
    }}
  ) {{
    records {{{STEP_FIELDS}    }}
  }}
}}
"""

DELETE_PLAY_STEP = """
mutation DeletePlayStep($id: UUID!, $client_id: String!) {
  deleteFromplay_stepsCollection(
    filter: { id: { eq: $id }, client_id: { eq: $client_id } }
  ) {
    affectedCount
  }
}
"""

LIST_ROLES = f"""
query GetRoles($client_id: String!) {{
  rolesCollection(
    filter: {{ client_id: {{ eq: $client_id }} }}
    orderBy: [{{ role_name: AscNullsLast }}]
  ) {{
    edges {{
      node {{{ROLE_FIELDS}      }}
    }}
  }}
}}
"""

CREATE_ROLE = f"""
mutation CreateRole($role_name: String!, $role_description: String!, $client_id: String!) {{
  insertIntorolesCollection(
    objects: [{{ role_name: $role_name, role_description: $role_description, client_id: $client_id }}]
  ) {{
    records {{{ROLE_FIELDS}    }}
  }}
}}
"""

# role_name is the identifier; only the description is updatable
UPDATE_ROLE = f"""
mutation UpdateRole($role_name: String!, $role_description: String!, $client_id: String!) {{
  updaterolesCollection(
    filter: {{ role_name: {{ eq: $role_name }}, client_id: {{ eq: $client_id }} }}
    set: {{ role_description: $role_description }}
  ) {{
    records {{{ROLE_FIELDS}    }}
  }}
}}
"""

DELETE_ROLE = """
mutation DeleteRole($role_name: String!, $client_id: String!) {
  deleteFromrolesCollection(
    filter: { role_name: { eq: $role_name }, client_id: { eq: $client_id } }
  ) {
    affectedCount
  }
}
"""
