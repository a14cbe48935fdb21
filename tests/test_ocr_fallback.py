from doc_extraction.ocr_fallback import extract_w2_fields_from_text, looks_like_employer_name, looks_like_person_name

LABELLED_W2_TEXT = """a Employee's social security number
XXX-XX-1234
b Employer identification number (EIN)
12-3456789
c Employer's name, address, and ZIP code
ACME WIDGETS LLC
100 INDUSTRIAL PARKWAY
e Employee's name, address, and ZIP code
JANE MARIE DOE
42 MAPLE STREET APT 5
1 Wages, tips, other comp.
52,000.00
2 Federal income tax withheld
7,800.50
3 Social security wages
52,000.00
5 Medicare wages and tips
52,000.00
"""


def test_labelled_w2_text_yields_all_fields():
    fields = extract_w2_fields_from_text(LABELLED_W2_TEXT)
    assert fields == {
        "employeeName": "JANE MARIE DOE",
        "employerName": "ACME WIDGETS LLC",
        "wages": "52000.00",
        "federalTaxWithheld": "7800.50",
        "employerEIN": "12-3456789",
        "employeeSSN": "XXX-XX-1234",
        "socialSecurityWages": "52000.00",
        "medicareWages": "52000.00",
    }


def test_name_above_street_address():
    text = "ROBERT SMITH\n123 MAIN ST\nSPRINGFIELD IL 62701\n"
    fields = extract_w2_fields_from_text(text)
    assert fields["employeeName"] == "ROBERT SMITH"


def test_form_vocabulary_is_not_a_name():
    text = "VOID\nCOPY FOR EMPLOYEE RECORDS\nROBERT SMITH\n"
    fields = extract_w2_fields_from_text(text)
    assert fields == {"employeeName": "ROBERT SMITH"}


def test_box_label_without_amount_is_skipped():
    text = "1 Wages, tips, other comp. 2 Federal income tax withheld\n"
    assert extract_w2_fields_from_text(text) == {}


def test_empty_text():
    assert extract_w2_fields_from_text("") == {}


def test_person_name_heuristics():
    assert looks_like_person_name("JANE DOE")
    assert not looks_like_person_name("Jane Doe")
    assert not looks_like_person_name("JANE Q DOE")
    assert not looks_like_person_name("MADONNA")
    assert not looks_like_person_name("DALLAS TEXAS")
    # whole words only: names containing stop words as substrings still pass
    assert looks_like_person_name("DAVE VINCENT")


def test_employer_name_heuristics():
    assert looks_like_employer_name("ACME WIDGETS LLC")
    assert not looks_like_employer_name("FORM W-2")
    assert not looks_like_employer_name("AB")
