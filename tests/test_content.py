from overlay.http.content import httpdate, isNotModified, parseHTTPDate, parseRange


def test_httpdate():
	assert httpdate(0) == "Thu, 01 Jan 1970 00:00:00 GMT"
	assert parseHTTPDate(httpdate(1_700_000_000)) == 1_700_000_000


def test_parse_date_malformed():
	assert parseHTTPDate(None) is None
	assert parseHTTPDate("") is None
	assert parseHTTPDate("yesterday") is None


def test_not_modified():
	modified = 1_700_000_000.75
	assert isNotModified(modified, httpdate(modified))
	assert isNotModified(modified, httpdate(modified + 60))
	assert not isNotModified(modified, httpdate(modified - 60))
	assert not isNotModified(modified, None)
	assert not isNotModified(modified, "garbage")


def test_range_absent():
	assert parseRange(None, 100) is None
	assert parseRange("", 100) is None


def test_range_single():
	assert parseRange("bytes=0-9", 100) == (0, 10)
	assert parseRange("bytes=10-", 100) == (10, 90)
	assert parseRange("bytes=90-200", 100) == (90, 10)
	assert parseRange("bytes=-5", 100) == (95, 5)
	assert parseRange("bytes=-500", 100) == (0, 100)


def test_range_unsatisfiable():
	assert parseRange("bytes=100-", 100) is False
	assert parseRange("bytes=5-2", 100) is False
	assert parseRange("bytes=-0", 100) is False
	assert parseRange("bytes=0-0", 0) is False


def test_range_invalid():
	assert parseRange("items=0-1", 100) is False
	assert parseRange("bytes=", 100) is False
	assert parseRange("bytes=a-b", 100) is False
	assert parseRange("bytes=-", 100) is False


def test_range_multiple():
	# Several ranges are answered with the whole content
	assert parseRange("bytes=0-1,5-6", 100) is None


# EOF
