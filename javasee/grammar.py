# javasee/grammar.py
"""
PEG grammar for javasee patterns.

A pattern is one Java-like expression with a few extra forms:

    _                       any expression
    :int: :double: :string: :bool:
                            any literal of that type
    :lambda:                any lambda expression
    ...                     as the only call argument, any argument list
    expr [conditional]      context suffix, also [!conditional],
                            [discarded] and [!discarded]

Operator precedence, loosest first: equality, relational (including
``instanceof``), shift, additive, multiplicative, unary/postfix.  Binary
operators are left-associative.
"""

from parsimonious.grammar import Grammar

PATTERN_GRAMMAR = Grammar(r'''
    # ─────────────────────────────────────────────────────────────
    # Top level
    # ─────────────────────────────────────────────────────────────

    pattern             = _ expression _ kind_suffix? _ end_of_input
    end_of_input        = ~r"\Z"

    kind_suffix         = "[" _ kind_negation? kind_word _ close_bracket
    kind_negation       = "!" _
    kind_word           = ~r"(conditional|discarded)(?![A-Za-z0-9_$])"

    # ─────────────────────────────────────────────────────────────
    # Binary operators
    # ─────────────────────────────────────────────────────────────

    expression          = relational equality_tail*
    equality_tail       = _ equality_op _ relational
    equality_op         = "==" / "!="

    relational          = shift relational_tail*
    relational_tail     = instanceof_tail / comparison_tail
    instanceof_tail     = _ "instanceof" !ident_char _ identifier
    comparison_tail     = _ comparison_op _ shift
    comparison_op       = "<=" / ">=" / ~r"<(?!<)" / ~r">(?!>)"

    shift               = additive shift_tail*
    shift_tail          = _ shift_op _ additive
    shift_op            = ">>>" / "<<" / ">>"

    additive            = multiplicative additive_tail*
    additive_tail       = _ additive_op _ multiplicative
    additive_op         = ~r"\+(?!\+)" / ~r"-(?!-)"

    multiplicative      = unary multiplicative_tail*
    multiplicative_tail = _ multiplicative_op _ unary
    multiplicative_op   = "*" / "/" / "%"

    # ─────────────────────────────────────────────────────────────
    # Unary and postfix forms
    # ─────────────────────────────────────────────────────────────

    unary               = prefix_update / prefix_unary / postfix
    prefix_update       = update_op _ unary
    prefix_unary        = unary_op _ unary
    unary_op            = "+" / "-" / "!"
    update_op           = "++" / "--"

    postfix             = primary selector* postfix_update?
    postfix_update      = _ update_op
    selector            = _ (member_selector / index_selector)
    member_selector     = "." _ identifier arguments?
    index_selector      = "[" _ !(kind_negation? kind_word _ "]") expression _ close_bracket

    arguments           = _ "(" _ argument_list? _ close_paren
    argument_list       = argument (_ "," _ argument)*
    argument            = repeated_marker / expression
    repeated_marker     = "..."

    # ─────────────────────────────────────────────────────────────
    # Primaries
    # ─────────────────────────────────────────────────────────────

    primary             = grouped
                        / instance_creation
                        / literal_wildcard
                        / literal
                        / keyword_literal
                        / wildcard
                        / function_call
                        / identifier_ref

    grouped             = "(" _ expression _ close_paren
    instance_creation   = "new" !ident_char _ identifier arguments
    literal_wildcard    = ":" wildcard_type ":"
    wildcard_type       = ~r"int|double|string|boolean|bool|lambda"

    literal             = double_literal / int_literal / string_literal
    double_literal      = ~r"(?:\d[\d_]*\.[\d_]*(?:[eE][+-]?\d+)?|\.\d[\d_]*(?:[eE][+-]?\d+)?|\d[\d_]*[eE][+-]?\d+)[dDfF]?|\d[\d_]*[dDfF]"
    int_literal         = ~r"0[xX][0-9a-fA-F_]+|0[bB][01_]+|\d[\d_]*"
    string_literal      = ~r'"(?:[^"\\\r\n]|\\.)*"'
    keyword_literal     = ~r"(true|false|null|this)(?![A-Za-z0-9_$])"
    wildcard            = "_" !ident_char

    function_call       = identifier arguments
    identifier_ref      = !reserved name_token
    identifier          = !reserved name_token
    name_token          = ~r"[A-Za-z_$][A-Za-z0-9_$]*"
    reserved            = ~r"(true|false|null|this|new|instanceof)(?![A-Za-z0-9_$])"
    ident_char          = ~r"[A-Za-z0-9_$]"

    # Named so a missing closer is reported where the input ran out.
    close_paren         = ")"
    close_bracket       = "]"

    _                   = ~r"\s*"
''')
