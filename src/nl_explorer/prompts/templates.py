"""Prompt templates for query translation.

Every prompt sent to the model is assembled here. Schema text and the user's
question are embedded verbatim: nothing is escaped, so both are a
prompt-injection surface. Keep all string assembly in this module.
"""
from __future__ import annotations

import re
from dataclasses import dataclass

from nl_explorer.catalog.descriptor import DatabaseDescriptor


_RELATIONAL_TEMPLATE = """You are connected to a relational database with the following schema:

<schema>
{schema}
</schema>

The database is implemented in PostgreSQL. Write a query to retrieve the data needed to answer the following question - or respond with "unknown" if the given schema does not contain relevant information. Output the query inside <query></query> tags and an explanation of what the query does inside <explanation></explanation> tags. Do not use any linebreak inside the <query></query> and <explanation></explanation> tags!

Question: {question}"""


_GRAPH_TEMPLATE = """You are connected to a graph database with the following schema:

<schema>
{schema}
</schema>

The database is implemented in Amazon Neptune and queried with openCypher. Write a query to retrieve the data needed to answer the following question - or respond with "unknown" if the given schema does not contain relevant information. Check you use relations only in the direction they run when matching. Return only an explanation of how the query works enclosed in <explanation></explanation> tags, and a valid openCypher query enclosed in <query></query> tags.

<question>{question}</question>"""


_ANALYTIC_TEMPLATE = """You are connected to an Amazon Athena database with the following schema:

<schema>
{schema}
</schema>

The database is implemented in AnsiSQL. Write a query to retrieve the data needed to answer the following question - or respond with "unknown" if the given schema does not contain relevant information. Output the query inside <query></query> tags and an explanation of what the query does inside <explanation></explanation> tags.

Question: {question}"""


_PLACEHOLDER_RE = re.compile(r"\{(schema|question)\}")


def _render(template: str, schema: str, question: str) -> str:
    # Single pass: schema and question may themselves contain braces or placeholder text.
    values = {"schema": schema, "question": question}
    return _PLACEHOLDER_RE.sub(lambda m: values[m.group(1)], template)


@dataclass(frozen=True)
class PromptBuilder:
    template: str

    def build(self, descriptor: DatabaseDescriptor, question: str) -> str:
        return _render(self.template, descriptor.schema_description, question)


RELATIONAL_PROMPT = PromptBuilder(_RELATIONAL_TEMPLATE)
GRAPH_PROMPT = PromptBuilder(_GRAPH_TEMPLATE)
ANALYTIC_PROMPT = PromptBuilder(_ANALYTIC_TEMPLATE)
